"""Metrics collection for the mention relay."""

from prometheus_client import Counter


class RelayMetrics:
    """Prometheus metrics for mention processing."""

    def __init__(self):
        self.mention_requests_total = Counter(
            'mention_relay_webhook_requests_total',
            'Mention webhook requests',
            ['status']
        )
        self.completions_total = Counter(
            'mention_relay_completions_total',
            'Completion API calls',
            ['status']
        )
        self.actions_total = Counter(
            'mention_relay_remote_actions_total',
            'Remote actions dispatched',
            ['action', 'status']
        )
        self.relays_total = Counter(
            'mention_relay_replies_total',
            'Replies posted to Slack',
            ['status']
        )

    def record_mention(self, accepted: bool):
        """Record an inbound mention webhook."""
        self.mention_requests_total.labels(status="accepted" if accepted else "rejected").inc()

    def record_completion(self, success: bool):
        self.completions_total.labels(status="success" if success else "error").inc()

    def record_action(self, action: str, success: bool):
        """Record a dispatched remote action and whether GitHub served it."""
        self.actions_total.labels(
            action=action, status="success" if success else "error"
        ).inc()

    def record_relay(self, success: bool):
        self.relays_total.labels(status="success" if success else "error").inc()


metrics = RelayMetrics()
