class SocketIOPublisher:
    """Outbound channel used by rooms and the registry.

    ``to`` may be a connection sid, a room token or the lobby group; all of
    them are Socket.IO rooms on the server side. Emitting through the shared
    ``socketio`` instance works from background tasks as well as handlers.
    """

    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event, data=None, to=None):
        args = () if data is None else (data,)
        self.socketio.emit(event, *args, to=to, namespace=self.namespace)

    def enter_room(self, sid, room):
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave_room(self, sid, room):
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)
