"""Chat completion client for the mention relay.

The client talks to an OpenAI-compatible endpoint through LangChain's
ChatOpenAI. Deployment actions are advertised with the legacy ``functions``
parameter; a reply carrying ``function_call`` is returned as an
ActionRequestReply, anything else as a TextReply.

No validation is applied to the model's arguments beyond JSON decoding, so a
malformed ``arguments`` string raises from ``complete``.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import structlog
from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from mention_relay.github.actions import ActionDescriptor, ActionInvocation
from mention_relay.metrics import metrics

logger = structlog.get_logger()


@dataclass
class TextReply:
    """A plain text answer, ready to relay."""

    content: str


@dataclass
class ActionRequestReply:
    """A request to run one remote action before answering.

    Attributes:
        invocation: The action and its decoded arguments.
        message: The assistant message as returned, to be echoed back into
                 the conversation ahead of the function result.
    """

    invocation: ActionInvocation
    message: AIMessage


CompletionReply = Union[TextReply, ActionRequestReply]


class CompletionClient:
    """OpenAI-compatible chat completion client.

    Attributes:
        llm_url: Base URL of the OpenAI-compatible API (e.g. https://api.openai.com/v1).
        api_key: API key sent as a bearer token.
        model_name: Name of the model to use.
        temperature: Sampling temperature.
        timeout: Request timeout in seconds.

    Example:
        >>> client = CompletionClient(
        ...     llm_url="https://api.openai.com/v1",
        ...     api_key="sk-...",
        ...     model_name="gpt-3.5-turbo",
        ... )
        >>> reply = await client.complete([SystemMessage(...), HumanMessage(...)])
    """

    def __init__(
        self,
        llm_url: str,
        api_key: str,
        model_name: str,
        temperature: float = 1.0,
        timeout: float = 30.0,
    ):
        self.llm_url = llm_url
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        """Get the LLM client, creating it if necessary."""
        if self._llm is None:
            self._llm = ChatOpenAI(
                base_url=self.llm_url,
                api_key=SecretStr(self.api_key),
                model=self.model_name,
                temperature=self.temperature,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._llm

    async def complete(
        self,
        conversation: Sequence[BaseMessage],
        actions: Optional[List[ActionDescriptor]] = None,
        allow_actions: bool = True,
    ) -> CompletionReply:
        """Send the conversation and return the top reply.

        Args:
            conversation: The messages so far, starting with the system message.
            actions: Actions to advertise as functions, if any.
            allow_actions: When False, ``function_call`` is set to ``none`` so
                           the model must answer in text.

        Returns:
            TextReply or ActionRequestReply.

        Raises:
            UnknownActionError: If the model names an action that does not exist.
            json.JSONDecodeError: If the function arguments are not valid JSON.
            Exception: Any error raised by the completion API call.
        """
        runnable = self.llm
        bind_kwargs = {}
        if actions:
            bind_kwargs["functions"] = [a.to_openai_function() for a in actions]
            if not allow_actions:
                bind_kwargs["function_call"] = "none"
        if bind_kwargs:
            runnable = runnable.bind(**bind_kwargs)

        logger.info(
            "Requesting completion",
            model=self.model_name,
            message_count=len(conversation),
            functions=len(actions) if actions else 0,
            allow_actions=allow_actions,
        )

        try:
            response = await runnable.ainvoke(list(conversation))
        except Exception:
            metrics.record_completion(success=False)
            raise
        metrics.record_completion(success=True)

        function_call = response.additional_kwargs.get("function_call")
        if function_call and allow_actions:
            invocation = ActionInvocation.from_function_call(
                function_call.get("name", ""),
                function_call.get("arguments"),
            )
            logger.info(
                "Model requested action",
                action=invocation.action.value,
                arguments=invocation.arguments,
            )
            return ActionRequestReply(invocation=invocation, message=response)

        content = response.content if isinstance(response.content, str) else str(response.content)
        return TextReply(content=content)
