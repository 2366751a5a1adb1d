"""Protocol constants.

Keep these in one place to avoid stringly-typed frame handling.
"""

CRLF = b"\r\n"

# Client to broker
CONNECT = "CONNECT"
PUB = "PUB"
SUB = "SUB"
UNSUB = "UNSUB"

# Broker to client
INFO = "INFO"
MSG = "MSG"
OK = "+OK"
ERR = "-ERR"

# Either direction
PING = "PING"
PONG = "PONG"

# Field counts for a MSG control line, with and without a reply inbox.
MSG_FIELDS = 4
MSG_FIELDS_INBOX = 5

INBOX_PREFIX = "_INBOX."
