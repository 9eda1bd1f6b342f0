class AbstractClient:
    """
    The AbstractClient wraps a client obtained from Tephra with convenience
    functions.

    The raw client is preserved for the user to issue any other commands.
    """

    def __init__(self, raw_client, **kwargs):
        self.raw_client = raw_client
        self.meta = kwargs

    def __repr__(self):
        return f"<{type(self).__name__} {self.meta.get('name', '')} {self.raw_client!r}>"
