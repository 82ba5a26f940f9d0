"""Constantes et utilitaires communs aux tests."""

ENDPOINT = "https://collector.example.test/api/data"
SECRET = "s3cr3t"


def login(client, email, is_admin=True):
    """Place l'identité dans la session comme le ferait l'application hôte."""
    with client.session_transaction() as sess:
        sess['user'] = {'email': email, 'is_admin': is_admin}
