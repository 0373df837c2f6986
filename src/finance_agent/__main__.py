"""Run a single question through the finance agent from the command line.

Usage:
    # Against the document API configured by FINANCE_API_URL
    python -m finance_agent --user-id=user-123 "Show my unpaid invoices"

    # Against throwaway in-memory data
    python -m finance_agent --memory --user-id=demo "I spent 45 on office supplies"
"""

import argparse
import asyncio
import sys

from finance_agent.agents import FinanceAgent
from finance_agent.clients import LLMConfigurationError, LLMProvider, create_llm_client
from finance_agent.config import configure_logging, get_logger
from finance_agent.entrypoint import ask
from finance_agent.services import create_in_memory_services, create_rest_services
from finance_agent.tools import ToolExecutor

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finance_agent",
        description="Ask the finance assistant a question or give it an instruction.",
    )
    parser.add_argument(
        "--user-id",
        default="",
        help="Tenant whose data the assistant works on",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use in-memory services instead of the document API",
    )
    parser.add_argument(
        "--provider",
        choices=[provider.value for provider in LLMProvider],
        default=None,
        help="LLM provider (default: LLM_PROVIDER)",
    )
    parser.add_argument("question", nargs="*", help="Question or instruction")
    return parser


async def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    question = " ".join(args.question)
    if not question:
        print("No question given.", file=sys.stderr)
        return 2

    services = create_in_memory_services() if args.memory else create_rest_services()
    try:
        llm_client = create_llm_client(args.provider)
    except LLMConfigurationError as e:
        logger.error("llm_not_configured", error=str(e))
        print(f"LLM provider is not configured: {e}", file=sys.stderr)
        return 1

    agent = FinanceAgent(llm_client=llm_client, tool_executor=ToolExecutor(services))
    logger.info("cli_question", memory=args.memory, provider=args.provider)

    print(await ask(question, args.user_id, agent=agent))
    return 0 if args.user_id.strip() else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
