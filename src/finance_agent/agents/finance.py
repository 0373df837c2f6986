"""The finance agent: decides which tools a request needs and answers from their output."""

import asyncio
from datetime import date
from typing import Any

import structlog

from finance_agent.agents.base import AgentReply, Conversation, ToolCallRecord
from finance_agent.clients.base import LLMClient, LLMResponse
from finance_agent.config import get_settings
from finance_agent.tools.definitions import FINANCE_TOOLS
from finance_agent.tools.executor import ToolExecutor
from finance_agent.tools.results import is_error, to_message_content

logger = structlog.get_logger(__name__)

FINANCE_SYSTEM_PROMPT = """You are an AI financial assistant for a company named {company_name}.
You are fully authorized and equipped to perform actions using the provided tools.
Your job is to add, create, update and list the company's financial data:
clients, transactions, invoices and quotations.

Today's date is {today}.

## Rules
- Only help with the company's finances and financial data. If asked about
  anything unrelated (weather, general trivia, coding help, ...), politely
  decline and do not call any tool.
- When a request maps to a tool, call the tool. Do not ask for permission.
- Use the read-only tools to ground answers about clients, invoices,
  quotations, revenue, expenses or profit instead of guessing.
- If a required value is missing (for example an expense without an amount),
  ask a short clarifying question instead of calling a tool.
- When adding an expense without a clear category, leave the category out;
  it defaults to "other".
- An invoice or quotation can only be created for an existing client. If the
  user asks to create a client and then bill them, call addClient first and
  createInvoice or createQuotation after it succeeds.
- Tool results starting with "Error:" mean that action failed. Tell the user
  what failed and why, and still report any other actions that succeeded.
- After an action, confirm exactly what was done, naming the created or
  updated record's number (for example "Invoice INV-001 has been created for
  Acme Corp").
- Keep answers short and in plain language. Format money with two decimals
  and its currency."""

FINAL_ANSWER_NUDGE = (
    "Do not call any more tools. Reply to my request now using the tool results above."
)

NO_RESPONSE_MESSAGE = (
    "The assistant could not generate a proper response. Please check the results and try again."
)


class FinanceAgent:
    """Answers one question per run, calling tools as the model requests.

    The agent keeps no state between runs. Each ``run`` builds its own
    conversation, so a single instance can serve concurrent requests.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        tool_executor: ToolExecutor,
        max_iterations: int | None = None,
        generation_timeout: float | None = None,
        company_name: str | None = None,
    ):
        settings = get_settings()
        self._llm_client = llm_client
        self._tool_executor = tool_executor
        self._max_iterations = max_iterations or settings.agent_max_iterations
        self._generation_timeout = generation_timeout or settings.agent_generation_timeout
        self._company_name = company_name or settings.company_name
        self._logger = logger.bind(agent="finance")

    def _get_system_prompt(self) -> str:
        return FINANCE_SYSTEM_PROMPT.format(
            company_name=self._company_name,
            today=date.today().isoformat(),
        )

    def _get_tools(self) -> list[dict[str, Any]]:
        return FINANCE_TOOLS

    async def _generate(
        self, conversation: Conversation, tools: list[dict[str, Any]] | None
    ) -> LLMResponse:
        """Call the model with a bounded wait; timeouts propagate to the caller."""
        return await asyncio.wait_for(
            self._llm_client.generate(
                system_prompt=self._get_system_prompt(),
                messages=conversation.to_llm_messages(),
                tools=tools,
            ),
            timeout=self._generation_timeout,
        )

    async def _run_tool_calls(
        self,
        conversation: Conversation,
        tool_calls: list[dict[str, Any]],
        user_id: str,
        records: list[ToolCallRecord],
    ) -> None:
        # Sequential, in the order the model listed them: later calls may
        # depend on earlier ones (create the client, then invoice it).
        for index, call in enumerate(tool_calls):
            name = call.get("name", "")
            arguments = call.get("arguments") or {}
            output = await self._tool_executor.execute(name, arguments, user_id)
            records.append(
                ToolCallRecord(
                    tool_name=name,
                    arguments=arguments,
                    output=output,
                    is_error=is_error(output),
                )
            )
            conversation.add_tool_result(
                tool_call_id=call.get("id") or f"call_{index}",
                tool_name=name,
                result=to_message_content(output),
            )

    def _final_text(self, content: str, records: list[ToolCallRecord]) -> str:
        if content.strip():
            return content.strip()
        # Fall back to the tools' own confirmations when the model said nothing
        confirmations = [r.output for r in records if isinstance(r.output, str)]
        if confirmations:
            return " ".join(confirmations)
        return NO_RESPONSE_MESSAGE

    async def run(
        self,
        question: str,
        user_id: str,
        history: list[dict[str, Any]] | None = None,
    ) -> AgentReply:
        """Answer ``question`` for tenant ``user_id``.

        Args:
            question: The user's free-text question or command.
            user_id: Tenant whose data every tool call is scoped to.
            history: Optional earlier ``{"role", "content"}`` turns.

        Returns:
            The reply text and a record of every tool call made.
        """
        log = self._logger.bind(user_id=user_id)
        log.info("run_started", question_length=len(question))

        conversation = Conversation(history)
        conversation.add_user_message(question)
        records: list[ToolCallRecord] = []
        tools = self._get_tools()

        for iteration in range(1, self._max_iterations + 1):
            response = await self._generate(conversation, tools)
            conversation.add_assistant_message(response.content, response.tool_calls)

            if not response.tool_calls:
                log.info("run_completed", iterations=iteration, tool_calls=len(records))
                return AgentReply(
                    text=self._final_text(response.content, records),
                    tool_calls=records,
                    iterations=iteration,
                )

            log.debug(
                "tool_calls_requested",
                iteration=iteration,
                tools=[call.get("name") for call in response.tool_calls],
            )
            await self._run_tool_calls(conversation, response.tool_calls, user_id, records)

        # Out of iterations: any further tool calls in this response are ignored
        log.warning("max_iterations_reached", max_iterations=self._max_iterations)
        conversation.add_user_message(FINAL_ANSWER_NUDGE)
        response = await self._generate(conversation, tools)
        return AgentReply(
            text=self._final_text(response.content, records),
            tool_calls=records,
            iterations=self._max_iterations + 1,
        )
