# Log event codes emitted by the shortening core (`extra={'event': ...}`)
SHORTEN_SUCCESS = 'SHORTEN_SUCCESS'
RESOLVE_SUCCESS = 'RESOLVE_SUCCESS'
RATE_REJECTED = 'RATE_REJECTED'
INVALID_URL = 'INVALID_URL'
DOMAIN_BLOCKED = 'DOMAIN_BLOCKED'
CODE_TAKEN = 'CODE_TAKEN'
GENERATION_EXHAUSTED = 'GENERATION_EXHAUSTED'
STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
