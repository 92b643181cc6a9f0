# core/events.py
"""
Registro simple de listeners: on() devuelve una clave, un_by_key() la libera.
Lo usan la geometría (evento "change"), la interacción de dibujo, el tracker
y el lienzo del mapa.
"""
import logging

log = logging.getLogger(__name__)


class ListenerKey:
    """Handle de una suscripción. release() solo tiene efecto la primera vez."""

    def __init__(self, target, event_name: str, callback):
        self.target = target
        self.event_name = event_name
        self.callback = callback
        self.released = False

    def release(self) -> bool:
        if self.released:
            return False
        self.released = True
        self.target._remove_listener(self.event_name, self.callback)
        return True


class EventEmitter:
    def __init__(self):
        self._handlers = {}  # event_name -> list of callables

    def on(self, event_name: str, callback) -> ListenerKey:
        """Registra callback para event_name y devuelve su ListenerKey."""
        self._handlers.setdefault(event_name, []).append(callback)
        return ListenerKey(self, event_name, callback)

    def _remove_listener(self, event_name: str, callback):
        handlers = self._handlers.get(event_name)
        if not handlers:
            return
        try:
            handlers.remove(callback)
        except ValueError:
            pass
        if not handlers:
            del self._handlers[event_name]

    def listener_count(self, event_name: str) -> int:
        return len(self._handlers.get(event_name, ()))

    def emit(self, event_name: str, *args):
        """Invoca los callbacks de event_name en orden de registro."""
        for cb in list(self._handlers.get(event_name, ())):
            try:
                cb(*args)
            except Exception:
                # Un listener roto no debe bloquear al resto ni a la UI
                log.exception("Error en listener de '%s'", event_name)


def un_by_key(key):
    """Libera una clave (o lista de claves). Devuelve cuántas se liberaron."""
    if key is None:
        return 0
    keys = key if isinstance(key, (list, tuple)) else [key]
    return sum(1 for k in keys if k.release())
