import os

import tephra
import tephra.data.redis as KV

# URLs look like redis[s]://[user:pass@]host:port[/db].
# With rediss://, point `ca_file` at a private CA and supply both
# `client_cert_file` and `client_key_file` for client certificate auth.
client = KV.connect(
    url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
    ca_file=os.getenv("REDIS_CA_FILE"),
    client_cert_file=os.getenv("REDIS_CLIENT_CERT_FILE"),
    client_key_file=os.getenv("REDIS_CLIENT_KEY_FILE"),
)

# The standard KV interface supports "get", "set", and "pop".

client.kv_pop("hello")

KV.kv_get(client, "hello")

KV.kv_set(client, "hello", "world")

client.kv_get("hello")

# Asking again for the same host:port hands back the same pooled client.

assert tephra.get_client(url=os.getenv("REDIS_URL", "redis://localhost:6379/0")) is client.raw_client

# All data clients from Tephra expose the underlying redis-py client for
# manual interaction.

r = client.raw_client
for key in r.scan_iter():
    print(key, r.get(key))
