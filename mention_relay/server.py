"""FastAPI application entry point for the mention relay.

Endpoints:
- GET|POST /hello: greeting
- POST /slack/mention: Slack app mention webhook
- GET /health: liveness probe
- GET /metrics: Prometheus metrics
"""

import html
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from mention_relay.config import RelaySettings, get_settings
from mention_relay.github.actions import DeploymentActions
from mention_relay.github.client import GitHubClient
from mention_relay.llm.completion import CompletionClient
from mention_relay.metrics import metrics
from mention_relay.processor import MentionProcessor
from mention_relay.slack.client import SlackClient
from mention_relay.slack.handler import parse_mention_event
from mention_relay.tasks import BackgroundTasks

logger = structlog.get_logger()

ACCEPTED_MESSAGE = "Message processing started"
REJECTED_MESSAGE = "This function only accepts app mention events."

# Global instances, initialized during lifespan startup
settings: Optional[RelaySettings] = None
processor: Optional[MentionProcessor] = None
slack_client: Optional[SlackClient] = None
github_client: Optional[GitHubClient] = None
background = BackgroundTasks()


def configure_logging(level: str) -> None:
    """Filter structlog output below the configured level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
    )


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(cfg: RelaySettings) -> None:
    logger.info(
        "Relay configuration",
        slack_api_base_url=cfg.slack_api_base_url,
        slack_user_token=_redact_secret(cfg.slack_user_token),
        slack_webhook_url=_redact_secret(cfg.slack_webhook_url, visible_chars=24),
        llm_url=cfg.llm_url,
        llm_api_key=_redact_secret(cfg.llm_api_key),
        llm_model=cfg.llm_model,
        llm_temperature=cfg.llm_temperature,
        actions_enabled=cfg.actions_enabled,
        reply_thread_policy=cfg.reply_thread_policy.value,
        github_base_url=cfg.github_base_url,
        github_token=_redact_secret(cfg.github_token),
        github_repository=f"{cfg.github_owner}/{cfg.github_repo}",
        deploy_branches=f"{cfg.deploy_head_branch} -> {cfg.deploy_base_branch}",
    )


def build_processor(
    cfg: RelaySettings,
    slack: SlackClient,
    gh_client: GitHubClient,
    tasks: BackgroundTasks,
) -> MentionProcessor:
    """Wire the relay dependencies into a MentionProcessor."""
    completion_client = CompletionClient(
        llm_url=cfg.llm_url,
        api_key=cfg.llm_api_key,
        model_name=cfg.llm_model,
        temperature=cfg.llm_temperature,
        timeout=cfg.request_timeout_seconds,
    )

    actions = None
    if cfg.actions_enabled:
        actions = DeploymentActions(
            github_client=gh_client,
            owner=cfg.github_owner,
            repo=cfg.github_repo,
            head_branch=cfg.deploy_head_branch,
            base_branch=cfg.deploy_base_branch,
            pr_title=cfg.deploy_pr_title,
        )

    return MentionProcessor(
        slack_client=slack,
        completion_client=completion_client,
        actions=actions,
        background=tasks,
        persona_prompt=cfg.persona_prompt,
        reply_thread_policy=cfg.reply_thread_policy,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings, wire clients, and close them on shutdown."""
    global settings, processor, slack_client, github_client

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Mention relay starting up")
    _log_configuration(settings)

    slack_client = SlackClient(
        token=settings.slack_user_token,
        webhook_url=settings.slack_webhook_url,
        api_base_url=settings.slack_api_base_url,
        timeout=settings.request_timeout_seconds,
    )
    github_client = GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout=settings.request_timeout_seconds,
    )
    processor = build_processor(settings, slack_client, github_client, background)

    yield

    logger.info("Mention relay shutting down", pending_tasks=len(background))
    await background.drain()
    await slack_client.close()
    await github_client.close()
    logger.info("Mention relay shutdown complete")


app = FastAPI(
    title="Mention Relay",
    description="Relays Slack app mentions to a chat completion model",
    version="1.0.0",
    lifespan=lifespan,
)


async def _read_body(request: Request) -> Any:
    """Decode a JSON or form body, or return None."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(
            ("application/x-www-form-urlencoded", "multipart/form-data")
        ):
            return dict(await request.form())
        return await request.json()
    except ValueError:
        return None


@app.api_route("/hello", methods=["GET", "POST"], response_class=HTMLResponse)
async def hello(request: Request):
    """Greet the ``name`` given in the query or body, or the World."""
    name = request.query_params.get("name")
    if not name and request.method == "POST":
        body = await _read_body(request)
        if isinstance(body, dict) and body.get("name"):
            name = str(body["name"])
    return HTMLResponse(f"Hello {html.escape(name or 'World')}!")


@app.post("/slack/mention", response_class=PlainTextResponse)
async def slack_mention(request: Request):
    """Slack app mention webhook receiver.

    Acknowledges immediately and processes the mention in a background task,
    so Slack does not wait on the completion API.
    """
    payload = await _read_body(request)
    event = parse_mention_event(payload)
    if event is None:
        metrics.record_mention(accepted=False)
        return PlainTextResponse(REJECTED_MESSAGE, status_code=400)

    if processor is None:
        logger.error("Relay not initialized")
        return PlainTextResponse("Relay not initialized", status_code=503)

    background.spawn(processor.process(event), name=f"mention-{event.ts}")
    metrics.record_mention(accepted=True)
    return PlainTextResponse(ACCEPTED_MESSAGE, status_code=200)


@app.get("/health")
async def health():
    """Liveness probe endpoint."""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def main() -> None:
    import uvicorn

    cfg = get_settings()
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
