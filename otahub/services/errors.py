class OTAError(Exception):
    pass


class ValidationFailed(OTAError):
    pass


class VersionConflict(OTAError):
    pass


class NotFound(OTAError):
    pass


class StoreFailure(OTAError):
    pass
