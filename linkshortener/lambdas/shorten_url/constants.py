# Log event codes emitted by the shorten_url handler
MISSING_CLIENT_ID = 'MISSING_CLIENT_ID'
BAD_REQUEST_BODY = 'BAD_REQUEST_BODY'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
SHORTEN_REJECTED = 'SHORTEN_REJECTED'
