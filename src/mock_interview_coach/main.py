"""
Main entry point for the Mock Interview Coach application.
"""

import argparse
import asyncio
import logging
import sys

from mock_interview_coach.config import get_settings
from mock_interview_coach.db.engine import create_engine, create_session_factory, init_models
from mock_interview_coach.db.repository import InMemorySessionStore, SqlAlchemySessionStore
from mock_interview_coach.io.text_interface import TextInterface
from mock_interview_coach.models.llm_client import OllamaTextGenerator
from mock_interview_coach.orchestrator.session_state_machine import SessionStateMachine


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_interview(argv: list[str] | None = None) -> None:
    """
    Run an interactive mock interview.

    Builds the store, the text generator and the state machine, then hands
    control to the text interface.
    """
    settings = get_settings()
    logger = logging.getLogger(__name__)

    parser = argparse.ArgumentParser(prog="mock-interview")
    parser.add_argument(
        "--store",
        choices=["sql", "memory"],
        default="sql",
        help="Persist sessions in the configured database or in memory",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override the configured database URL",
    )
    args = parser.parse_args(argv)

    logger.info("Initializing Mock Interview Coach...")
    logger.debug(f"Using model {settings.llm_model_name} at {settings.llm_base_url}")

    engine = None
    if args.store == "memory":
        store = InMemorySessionStore()
    else:
        engine = create_engine(args.database_url or settings.database_url, echo=settings.debug)
        await init_models(engine)
        store = SqlAlchemySessionStore(create_session_factory(engine))

    generator = OllamaTextGenerator(
        model=settings.llm_model_name,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout,
    )
    state_machine = SessionStateMachine(store=store, generator=generator)
    interface = TextInterface(state_machine)

    try:
        logger.info("Starting interview session...")
        await interface.run()
    finally:
        await generator.close()
        if engine is not None:
            await engine.dispose()


def main() -> None:
    """Main entry point for the application."""
    setup_logging()

    try:
        asyncio.run(run_interview(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterview session terminated by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
