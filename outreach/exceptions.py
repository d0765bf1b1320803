"""Service-layer errors. Routers turn these into HTTP responses."""


class LeadNotFound(LookupError):
    def __init__(self, lead_id):
        super().__init__(f"Lead {lead_id} not found")
        self.lead_id = lead_id


class StepNotFound(LookupError):
    def __init__(self, step_id):
        super().__init__(f"Cadence step {step_id} not found")
        self.step_id = step_id


class CadenceConflict(ValueError):
    """The user already has pending steps for this lead."""

    def __init__(self, lead_id, pending: int):
        super().__init__(f"Lead {lead_id} already has an active cadence ({pending} pending steps)")
        self.lead_id = lead_id
        self.pending = pending


class StepAlreadyClosed(ValueError):
    """Completed or skipped steps cannot change."""

    def __init__(self, step_id):
        super().__init__(f"Cadence step {step_id} is already completed or skipped")
        self.step_id = step_id


class StepNotOwned(PermissionError):
    """The step belongs to another user's cadence."""

    def __init__(self, step_id):
        super().__init__(f"Cadence step {step_id} belongs to another user")
        self.step_id = step_id
