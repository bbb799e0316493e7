from app.commands.bot_engine.process_message_command import ProcessMessageCommand
from app.schemas.bot_engine import InboundBotMessage


def test_execute_returns_engine_result(db, notifier, tenant_id, setup_bot_config, greeting_flow):
    """Execute hands the message to the engine and returns its result."""
    message = InboundBotMessage(
        tenant_id=tenant_id, contact_phone="11987654321", contact_name="Ana", message_text="oi"
    )

    result = ProcessMessageCommand(db, notifier=notifier).execute(message)

    assert result.success is True
    assert result.responses[0].content == "Olá Ana! Bem-vindo."


def test_execute_passes_through_engine_errors(db, notifier, tenant_id):
    """Engine error results are returned unchanged."""
    message = InboundBotMessage(tenant_id=tenant_id, contact_phone="11987654321", message_text="oi")

    result = ProcessMessageCommand(db, notifier=notifier).execute(message)

    assert result.success is False
    assert result.error == "bot_disabled"
