import logging
import signal
from typing import Callable, Optional

from app_config import AppConfig, AppConfigurationError, load_app_config, resolve_config_path
from assistant import (
    AssistantConfig,
    AssistantConfigurationError,
    ChatSession,
    LlamaBackend,
    load_system_prompt,
)
from chime import ChimePlayer, SoundDeviceAudioOutput
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig

APP_LOGGER = "focus_app"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # websockets logs every handshake at INFO.
    logging.getLogger("websockets").setLevel(logging.WARNING)
    return logging.getLogger(APP_LOGGER)


def setup_signal_handlers(request_stop: Callable[[], None]) -> None:
    """Route SIGINT and SIGTERM to a graceful engine stop."""
    logger = logging.getLogger(APP_LOGGER)

    def on_signal(signum: int, _frame) -> None:
        logger.info("%s received, stopping focus timer", signal.Signals(signum).name)
        request_stop()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, on_signal)


def build_chime_player(app_config: AppConfig, logger: logging.Logger) -> Optional[ChimePlayer]:
    settings = app_config.chime
    if not settings.enabled:
        logger.info("Completion chime disabled")
        return None
    output = SoundDeviceAudioOutput(
        output_device_index=settings.output_device,
        logger=logging.getLogger("chime.output"),
    )
    logger.info("Completion chime enabled (volume: %d)", settings.volume)
    return ChimePlayer(output, logger=logging.getLogger("chime"))


def build_chat_session(app_config: AppConfig, logger: logging.Logger) -> Optional[ChatSession]:
    if not app_config.assistant.enabled:
        logger.info("Study assistant disabled")
        return None
    config = AssistantConfig.from_settings(app_config.assistant)
    assistant_logger = logging.getLogger("assistant")
    logger.info("Loading study assistant model: %s", config.model_path)
    return ChatSession(
        LlamaBackend(config),
        model_name=config.model_name,
        system_prompt=load_system_prompt(config.system_prompt_path, logger=assistant_logger),
        max_tokens=config.max_tokens,
        max_history_turns=config.max_history_turns,
        logger=assistant_logger,
    )


def start_ui_server(app_config: AppConfig, logger: logging.Logger) -> Optional[UIServer]:
    """Start the page server, or return None so the timer keeps running headless."""
    try:
        config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        logger.warning("Continuing without UI server.")
        return None
    if not config.enabled:
        logger.info("UI server disabled")
        return None

    server = UIServer(config=config, logger=logging.getLogger("ui_server"))
    try:
        server.start(timeout_seconds=5.0)
    except Exception as error:
        logger.error("UI server startup failed: %s", error)
        logger.warning("Continuing without UI server.")
        return None
    logger.info("Focus page ready at %s", config.base_url)
    return server


def main() -> int:
    logger = setup_logging()

    try:
        config_path = resolve_config_path()
        app_config = load_app_config(str(config_path))
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1
    logger.info("Loaded runtime config: %s", config_path)

    try:
        chat_session = build_chat_session(app_config, logger)
    except AssistantConfigurationError as error:
        logger.error("Assistant configuration error: %s", error)
        return 1
    except Exception as error:
        logger.error("Assistant initialization error: %s", error, exc_info=True)
        return 1

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            chime_player=build_chime_player(app_config, logger),
            chat_session=chat_session,
            ui_server=start_ui_server(app_config, logger),
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
