"""APIUS Session Gateway package.

To use the Flask app:
    from session_gateway.flask_app import create_app

To use the session logic without Flask:
    from session_gateway.core.session_proxy import SessionProxy
    from session_gateway.core.provisioner import ProvisionerClient
"""
# Note: flask_app is not imported here so CLI scripts that only need
# session_gateway.core do not pay for Flask.

__version__ = "1.0.0"
