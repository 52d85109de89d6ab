from nacl.exceptions import BadSignatureError, ValueError as NaclValueError
from nacl.signing import VerifyKey


def verify_ed25519(public_key_bytes: bytes, message: bytes, signature: bytes) -> bool:
    try:
        vk = VerifyKey(public_key_bytes)
        vk.verify(message, signature)
        return True
    except (BadSignatureError, NaclValueError):
        return False
