"""
Notificador de cambios (Server-Sent Events)

Difusión en memoria, fire-and-forget: cada evento se entrega a lo sumo una
vez a los suscriptores presentes al publicar. Sin reintentos ni historial.
"""
import asyncio
import itertools
import json
import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, Optional

from fastapi import Request

logger = logging.getLogger(__name__)

_subscription_ids = itertools.count(1)

DEFAULT_MAX_PENDING = 100


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class Subscription:
    """
    Un cliente conectado a /api/events; sus mensajes esperan en una cola.

    La cola tiene un tope: si el cliente no consume, deliver() lanza
    asyncio.QueueFull y el evento se pierde solo para él.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING):
        self.id = next(_subscription_ids)
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=max_pending)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def deliver(self, message: str) -> None:
        self._queue.put_nowait(message)

    def close(self) -> None:
        # None marca el fin del stream; con la cola llena se sacrifica un mensaje
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

    async def next_message(self) -> Optional[str]:
        return await self._queue.get()


class ChangeNotifier:
    """Registro de suscriptores; una instancia por proceso (app.state.notifier)"""

    def __init__(self, subscription_factory: Callable[[], Subscription] = Subscription):
        self._subscription_factory = subscription_factory
        self._subscribers: Dict[int, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = self._subscription_factory()
        self._subscribers[subscription.id] = subscription
        logger.info(f"Cliente {subscription.id} conectado. Clientes activos: {self.subscriber_count}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscribers.pop(subscription.id, None) is not None:
            logger.info(f"Cliente {subscription.id} desconectado. Clientes activos: {self.subscriber_count}")

    def publish(self, event_type: str, payload: Any) -> int:
        """
        Envía {type, data, timestamp} a todos los suscriptores actuales.

        Nunca lanza: un fallo de serialización o de un suscriptor se registra
        y se ignora.

        Returns:
            Cantidad de suscriptores a los que se entregó el evento
        """
        try:
            message = json.dumps(
                {"type": event_type, "data": payload, "timestamp": utc_timestamp()},
                ensure_ascii=False,
                default=str,
            )
        except (TypeError, ValueError):
            logger.exception(f"❌ No se pudo serializar el evento {event_type}")
            return 0

        delivered = 0
        # Copia: los suscriptores que entren durante la difusión no reciben este evento
        for subscription in list(self._subscribers.values()):
            try:
                subscription.deliver(message)
            except asyncio.QueueFull:
                logger.warning(f"⚠️ Cliente {subscription.id} saturado, se descarta {event_type}")
                continue
            except Exception:
                logger.warning(f"⚠️ Fallo enviando {event_type} al cliente {subscription.id}", exc_info=True)
                continue
            delivered += 1

        logger.info(f"📡 Actualización enviada a {delivered} clientes: {event_type}")
        return delivered

    def close(self) -> None:
        """Cierra todos los streams abiertos (apagado del servidor)"""
        for subscription in list(self._subscribers.values()):
            subscription.close()
        self._subscribers.clear()


def format_sse(data: Any) -> str:
    if not isinstance(data, str):
        data = json.dumps(data, ensure_ascii=False)
    return f"data: {data}\n\n"


async def event_stream(
    notifier: ChangeNotifier,
    ping_interval: Optional[float] = None,
) -> AsyncIterator[str]:
    """
    Genera los frames SSE de un cliente.

    La suscripción se crea al empezar a iterar, así un stream que nunca
    arranca no deja nada registrado. Primero un evento "connected", luego
    cada mensaje publicado. Si pasan ``ping_interval`` segundos sin eventos
    se envía un comentario para mantener viva la conexión. Al desconectarse
    el cliente Starlette cancela el generador y el ``finally`` da de baja la
    suscripción.
    """
    subscription = notifier.subscribe()
    try:
        yield format_sse({
            "type": "connected",
            "message": "Conectado al servidor",
            "timestamp": utc_timestamp(),
        })
        while True:
            try:
                message = await asyncio.wait_for(subscription.next_message(), timeout=ping_interval)
            except asyncio.TimeoutError:
                yield ": ping\n\n"
                continue
            if message is None:
                break
            yield format_sse(message)
    finally:
        notifier.unsubscribe(subscription)


def get_notifier(request: Request) -> ChangeNotifier:
    """Dependencia FastAPI: notificador creado en el arranque"""
    return request.app.state.notifier
