class SecurityConfig:
    """Centralized security configuration"""

    # Rate limiting tiers
    RATE_LIMITS = {
        'default': ["2000 per day", "200 per hour", "30 per minute"],
        'generate': ["100 per hour", "5 per minute"],
    }

    # Input validation limits
    MAX_REQUEST_SIZE = 5 * 1024 * 1024  # 5MB of usage reports
    MAX_CSS_FILE_SIZE = 10 * 1024 * 1024  # 10MB per original stylesheet
