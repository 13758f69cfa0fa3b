import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


class FieldCipher:
    """Wraps secrets at rest with a Fernet master key"""

    def __init__(self, master_key: str):
        self._fernet = Fernet(master_key.encode() if isinstance(master_key, str) else master_key)

    @classmethod
    def from_config(cls, config) -> "FieldCipher":
        master_key = getattr(config, "ENCRYPTION_MASTER_KEY", "")
        if not master_key:
            # Derive a stable development key from the JWT secret
            digest = hashlib.sha256(config.JWT_SECRET.encode()).digest()
            master_key = base64.urlsafe_b64encode(digest).decode()
        return cls(master_key)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode()).decode()
        except InvalidToken as e:
            raise ValueError("Unable to decrypt value with the configured master key") from e
