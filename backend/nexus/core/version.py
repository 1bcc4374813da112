"""
Version management for the Business Nexus API
"""
from nexus.__version__ import __version__

# API Version
API_VERSION = __version__
MIN_CLIENT_VERSION = "1.0.0"  # Minimum compatible web client version

# Feature flags
FEATURES = {
    "realtime_messaging": True,
    "presence": True,
    "typing_indicators": True,
    "collaboration_requests": True,
}

def get_version_info():
    """Get version and feature information"""
    return {
        "version": API_VERSION,
        "features": FEATURES,
        "min_client_version": MIN_CLIENT_VERSION
    }
