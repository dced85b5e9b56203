from typing import Any


# Type aliases for Lambda proxy integration payloads
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]
