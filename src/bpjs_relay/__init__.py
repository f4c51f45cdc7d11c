"""
bpjs-relay: signing relay for the BPJS Kesehatan VClaim REST API.

Signs participant and reference lookups with the consumer credentials issued
by BPJS and forwards them upstream on behalf of a browser dashboard.
"""

__version__ = "1.0.0"
