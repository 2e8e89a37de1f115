import typing


Listener = typing.Callable[..., None]


class EventEmitter:

	"""
	A minimal synchronous observer used to propagate setting changes.

	Voices, sections and pieces emit ``"changed"`` whenever one of their
	settings is assigned, and whoever caches results derived from them
	listens for it. Listeners run immediately, in registration order, so a
	cache is already invalid by the time the setter returns.
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[Listener]] = {}

	def on (self, event_name: str, listener: Listener) -> None:

		"""
		Register a listener for an event name.
		"""

		self._listeners.setdefault(event_name, []).append(listener)

	def off (self, event_name: str, listener: Listener) -> None:

		"""
		Unregister a previously registered listener.

		Raises ``ValueError`` if the listener is not registered for the event.
		"""

		if listener not in self._listeners.get(event_name, []):
			raise ValueError(f"Listener not registered for event {event_name!r}")

		self._listeners[event_name].remove(listener)

	def emit (self, event_name: str, *args: typing.Any) -> None:

		"""
		Call every listener of the event with the given arguments.
		"""

		for listener in list(self._listeners.get(event_name, [])):
			listener(*args)
