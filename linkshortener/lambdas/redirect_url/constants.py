# Log event codes emitted by the redirect_url handler
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
CONFIG_LOAD_FAILED = 'CONFIG_LOAD_FAILED'
REDIRECT_FAILED = 'REDIRECT_FAILED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
