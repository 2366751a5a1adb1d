""" A class representation of a delivered message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Message:
    """ The :class:`Message` is what a subscription callback receives: the
        *subject* the message was published on, the *payload*, the *sid* of
        the subscription it arrived on, the *connection* that received it,
        and the reply *inbox*, if the publisher asked for one.

        The payload is the raw bytes from the wire, unless the receiving
        connection has an encoder, in which case it is the decoded value.
    """

    subject: str
    payload: Any
    sid: str
    connection: Any = None
    inbox: Optional[str] = None


    def reply(self, payload):
        """ Publish *payload* to the inbox of this message, via the
            connection that received it.
        """

        if self.inbox is None:
            raise ValueError('message on ' + self.subject + ' has no reply inbox')

        if self.connection is None:
            raise ValueError('message is not associated with a connection')

        self.connection.publish(self.inbox, payload)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
