from .association_kind import AssociationKind as AssociationKind
from .http_method import HttpMethod as HttpMethod
from .error_code import ErrorCode as ErrorCode
