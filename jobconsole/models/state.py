"""Job state snapshot as reported by the job state store."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from jobconsole.core.timestamps import deserialize_datetime, normalize

PROCESSING_STATE_NAME = "Processing"
STARTED_AT_KEY = "StartedAt"


class StateData(BaseModel):
    """Current state of a job: its name plus free-form string metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: dict[str, str] = {}

    @property
    def started_at(self) -> datetime | None:
        """Parsed ``StartedAt`` metadata, or ``None`` when absent.

        Raises ``ValueError`` if the value is present but unparseable.
        """
        raw = self.data.get(STARTED_AT_KEY)
        if not raw:
            return None
        return deserialize_datetime(raw)

    def is_processing(self, state_name: str = PROCESSING_STATE_NAME) -> bool:
        return self.name.casefold() == state_name.casefold()

    def is_processing_run(
        self,
        timestamp: datetime,
        state_name: str = PROCESSING_STATE_NAME,
    ) -> bool:
        """Whether this state is the processing run that started at *timestamp*."""
        if not self.is_processing(state_name):
            return False
        return self.started_at == normalize(timestamp)
