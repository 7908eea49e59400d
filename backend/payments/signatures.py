import hashlib
import hmac

SIMULATED_SIGNATURE = 'SIMULATED'


def generate_signature(body, secret):
    """Hex HMAC-SHA256 of the raw request body"""
    if isinstance(body, str):
        body = body.encode('utf-8')
    return hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()


def verify_signature(body, signature, secret):
    if not signature:
        return False
    expected = generate_signature(body, secret)
    return hmac.compare_digest(expected.lower(), signature.lower())
