from pydantic import BaseModel, Field


class SearchRules(BaseModel):
    # Cap on expand() output at the search endpoint; expand itself is uncapped
    max_variants: int = Field(default=4096, gt=0)
    max_query_length: int = Field(default=64, gt=0)


class SchedulingRules(BaseModel):
    revalidation_delay_seconds: int = Field(default=10, ge=0)
    publish_batch_limit: int = Field(default=20, gt=0)
    active_batch_limit: int = Field(default=50, gt=0)
    lookback_hours: int = Field(default=24, gt=0)


class JobsRules(BaseModel):
    poll_interval_seconds: float = Field(default=60.0, gt=0)
    max_attempts: int = Field(default=1, gt=0)
    retry_delay_seconds: int = Field(default=60, gt=0)


class Rules(BaseModel):
    search: SearchRules = Field(default_factory=SearchRules)
    scheduling: SchedulingRules = Field(default_factory=SchedulingRules)
    jobs: JobsRules = Field(default_factory=JobsRules)
