"""Domain-specific exceptions.

Every error a user can see carries ``message_key``, looked up in the i18n
catalog when the session controller fills its error slot.
"""


class ServiceError(Exception):
    message_key = "error.generic"


class SearchValidationError(ServiceError):
    pass


class EmptyQuery(SearchValidationError):
    message_key = "search.empty_query"


class MissingLocation(SearchValidationError):
    message_key = "search.missing_location"


class RecommendationRequestError(ServiceError):
    message_key = "search.request_failed"


class VoiceCaptureError(ServiceError):
    pass


class CapabilityUnavailable(VoiceCaptureError):
    message_key = "voice.unsupported"


class RecognitionError(VoiceCaptureError):
    message_key = "voice.failed"


class GeocodingError(ServiceError):
    message_key = "location.lookup_failed"


class ProfileUpdateError(ServiceError):
    message_key = "location.save_failed"


class InvalidTransition(ServiceError):
    pass
