"""
Envlock keeps an encrypted copy of a .env file that is safe to commit.

The plaintext file is encrypted with ChaCha20-Poly1305 under a key derived
from a password with Argon2id. Two files are written: the ciphertext and a
JSON metadata file holding the salt, nonce and key derivation parameters.
Both are needed, together with the password, to decrypt.

Configure the paths once (optional, defaults shown):

\b
    $ envlock init --env .env --enc .env.enc --meta .env.meta.json

Encrypt the plaintext file:

\b
    $ envlock lock

Decrypt it again:

\b
    $ envlock unlock

Show keys that were added, removed or changed since the last lock:

\b
    $ envlock diff

Encrypt, then commit and push the encrypted files:

\b
    $ envlock sync -m "chore(env): rotate api key"
"""

__version__ = '1.0.0'
