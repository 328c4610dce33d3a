"""
The `crypt` package centralizes password hashing so every workflow
(registration, login, password change) uses the same bcrypt settings.

Contents
--------
- encrypt_decrypt
    Exposes the `EncryptionDec` class:
        * `hash_password`: hashes plaintext passwords with bcrypt at the configured cost
        * `check_passwords`: verifies a plaintext password against a stored hash
"""
