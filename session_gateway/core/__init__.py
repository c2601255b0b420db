"""Core Session Logic

Protocol translation between the REST surface and the session provisioner,
independent of Flask.

Module Structure:
    - models.py          : Request-scoped data model (credentials, outcomes, bundles)
    - response_parser.py : Provisioner ``key=value`` replies -> structured results
    - errors.py          : Error taxonomy + provisioner failure normalization
    - challenge.py       : APIUS Authorization scheme codec
    - provisioner/       : HTTP client for the provisioner's identity API
    - session_proxy.py   : Session contract (create/validate/authorize/attributes/logout)
    - documents.py       : XML / Atom rendering of session attributes

Usage Pattern:
    from session_gateway.core.provisioner import ProvisionerClient
    from session_gateway.core.session_proxy import SessionProxy
    from session_gateway.core.models import Credentials

    proxy = SessionProxy(ProvisionerClient("http://openam:8080/openam"))
    outcome = proxy.create_session(Credentials("pmorris", "secret"))
    if outcome.ok:
        token = outcome.value
"""
