from gazeta.rules.models import Rules


class RulesAdapter:
    """Exposes loaded Rules through the component RulesPorts."""

    def __init__(self, rules: Rules):
        self.rules = rules

    # --- search.RulesPort ---

    def get_max_variants(self) -> int:
        return self.rules.search.max_variants

    def get_max_query_length(self) -> int:
        return self.rules.search.max_query_length

    # --- scheduler.RulesPort ---

    def get_revalidation_delay_seconds(self) -> int:
        return self.rules.scheduling.revalidation_delay_seconds

    def get_publish_batch_limit(self) -> int:
        return self.rules.scheduling.publish_batch_limit

    def get_active_batch_limit(self) -> int:
        return self.rules.scheduling.active_batch_limit

    def get_lookback_hours(self) -> int:
        return self.rules.scheduling.lookback_hours
