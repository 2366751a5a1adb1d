""" The subscription registry: two routing tables kept deliberately apart.

    The id table maps a subscription id to the callback that handles
    messages for it; it is what the dispatch loop consults. The replay table
    maps a subject to the queue group and callback last used to subscribe to
    it; it is what :func:`Connection.reconnect` consults, because ids are
    regenerated for every new connection.
"""

import secrets

from .errors import CallbackError, UnknownSubscriptionError


def new_sid():
    """ Return a globally unique subscription id: 128 random bits,
        hex-encoded.
    """

    return secrets.token_hex(16)


class Subscription:
    """ A single live subscription, owned by a :class:`Registry`.
    """

    def __init__(self, sid, subject, callback, queue=None, transient=False):

        self.sid = sid
        self.subject = subject
        self.callback = callback
        self.queue = queue
        self.transient = transient


    def __repr__(self):
        if self.queue is None:
            return '<Subscription %s %s>' % (self.sid, self.subject)
        return '<Subscription %s %s queue=%s>' % (self.sid, self.subject, self.queue)


# end of class Subscription



class Registry:
    """ Id-indexed and subject-indexed routing for subscriptions. No locking
        is done here: a registry belongs to exactly one connection, and all
        access happens on the thread driving that connection.
    """

    def __init__(self):

        self._by_sid = dict()
        self._replay = dict()


    def __contains__(self, sid):
        return sid in self._by_sid


    def __len__(self):
        return len(self._by_sid)


    def _register(self, subject, callback, queue, transient=False):

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        sid = new_sid()
        while sid in self._by_sid:
            sid = new_sid()

        self._by_sid[sid] = Subscription(sid, subject, callback, queue, transient)
        return sid


    def add(self, subject, callback, queue=None):
        """ Register a subscription and the intent to replay it on reconnect.
            Returns the newly generated subscription id. A later registration
            for the same subject replaces the replay record, but leaves any
            earlier subscription id in place.
        """

        sid = self._register(subject, callback, queue)

        self._replay[subject] = (queue, callback)
        return sid


    def add_transient(self, subject, callback):
        """ Register a subscription that is never replayed; this is what a
            request/reply inbox uses.
        """

        return self._register(subject, callback, None, transient=True)


    def remove(self, sid):
        """ Remove a subscription id from dispatch eligibility. The replay
            record for its subject is left alone; see :func:`forget`.
        """

        self._by_sid.pop(sid, None)


    def forget(self, subject):
        """ Drop the replay record for *subject*, if any.
        """

        self._replay.pop(subject, None)


    def release(self, sid):
        """ Remove *sid* as :func:`remove` does, and bring the replay record
            for its subject in line with what is still live: it is rewritten
            from the most recent remaining replayable subscription to that
            subject, or forgotten if there is none. This is what an
            unconditional unsubscribe means to the caller: stop, now and
            after any reconnect.
        """

        try:
            subscription = self._by_sid.pop(sid)
        except KeyError:
            return

        subject = subscription.subject

        if subject not in self._replay:
            return

        for remaining in reversed(list(self._by_sid.values())):
            if remaining.subject == subject and not remaining.transient:
                self._replay[subject] = (remaining.queue, remaining.callback)
                return

        self.forget(subject)


    def get(self, sid):

        try:
            return self._by_sid[sid]
        except KeyError:
            raise UnknownSubscriptionError(sid) from None


    def dispatch(self, sid, message):
        """ Invoke the callback registered for *sid* with *message*. An
            unknown *sid* is a protocol violation, not something to drop
            quietly. Anything the callback raises comes back wrapped in a
            :class:`CallbackError`; the registry itself is unaffected.
        """

        subscription = self.get(sid)

        try:
            subscription.callback(message)
        except Exception as exc:
            raise CallbackError(sid) from exc


    def sids(self):
        return list(self._by_sid.keys())


    def snapshot(self):
        """ Return the replay records as a list of (subject, queue, callback)
            tuples, in registration order.
        """

        records = list()

        for subject, record in self._replay.items():
            queue, callback = record
            records.append((subject, queue, callback))

        return records


    def clear(self):

        self._by_sid.clear()


# end of class Registry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
