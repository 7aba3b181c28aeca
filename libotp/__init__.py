"""libotp -- HOTP / TOTP one-time passwords and otpauth:// key URIs"""

__version__ = "1.0.0"
