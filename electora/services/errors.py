class LedgerError(Exception):
    """Base class for rejected ledger operations.

    Every subclass is a precondition violation detected before any state is
    written, so a caller that catches one can rely on the ledger being unchanged.
    """

    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message=None, **context):
        self.context = context
        super().__init__(message or self.default_message())

    def default_message(self):
        return self.code

    def to_dict(self):
        return {"ok": False, "error": self.code, "message": str(self), **self.context}


class Unauthorized(LedgerError):
    code = "UNAUTHORIZED"
    status_code = 403

    def default_message(self):
        return "Only the organiser may perform this operation."


class AlreadyRegistered(LedgerError):
    code = "ALREADY_REGISTERED"
    status_code = 409

    def default_message(self):
        registry = self.context.get("registry", "record")
        identity = self.context.get("identity")
        return f"{registry} {identity!r} is already registered."


class UnknownVoter(LedgerError):
    code = "UNKNOWN_VOTER"
    status_code = 404

    def default_message(self):
        return f"No voter is registered as {self.context.get('identity')!r}."


class UnknownCandidate(LedgerError):
    code = "UNKNOWN_CANDIDATE"
    status_code = 404

    def default_message(self):
        return f"No candidate is registered as {self.context.get('identity')!r}."


class AlreadyVoted(LedgerError):
    code = "ALREADY_VOTED"
    status_code = 409

    def default_message(self):
        return "This voter has already cast a vote; use change vote instead."


class NotYetVoted(LedgerError):
    code = "NOT_YET_VOTED"
    status_code = 409

    def default_message(self):
        return "This voter has not cast a vote yet."


class ElectionNotInitialised(LedgerError):
    code = "ELECTION_NOT_INITIALISED"
    status_code = 503

    def default_message(self):
        return "No election has been initialised; run 'flask election init'."
