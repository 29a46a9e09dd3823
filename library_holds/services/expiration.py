"""
Job recorrente de expiração de reservas.

Garantias:
    - No máximo um job agendado por processo (start devolve False se já
      houver um)
    - No máximo uma varredura executando por vez: um tick que encontra a
      varredura anterior ainda rodando é descartado, não enfileirado
    - stop cancela os próximos ticks; uma varredura em andamento termina
    - Falha numa varredura é registrada e não derruba o agendamento

Uso:
    expiration_scheduler.start(interval_minutes=60)
    ...
    expiration_scheduler.stop()
"""

import asyncio
import logging
from typing import Awaitable, Callable

from library_holds.core.clock import Clock, utcnow
from library_holds.db.session import async_session_factory
from library_holds.schemas.reservation import ExpirationResult
from library_holds.schemas.system import ExpirationJobStatus
from library_holds.services.reservations import ReservationService

logger = logging.getLogger(__name__)

Sweep = Callable[[], Awaitable[ExpirationResult]]


async def run_expiration_sweep() -> ExpirationResult:
    """Executa uma varredura com sessão própria (fora de request)."""
    async with async_session_factory() as db:
        return await ReservationService(db).expire_old_reservations()


class ExpirationScheduler:
    """
    Dono do estado do job de expiração: handle do timer e flag de
    varredura em andamento.

    Args:
        sweep: Corrotina que executa uma varredura (default: banco real)
        clock: Relógio usado em last_run_at
    """

    def __init__(self, sweep: Sweep | None = None, clock: Clock = utcnow):
        self._sweep = sweep or run_expiration_sweep
        self._clock = clock
        self._ticker: asyncio.Task | None = None
        self._sweep_running = False
        self._inflight: set[asyncio.Task] = set()
        self.interval_minutes: float | None = None
        self.last_run_at = None
        self.last_expired_count: int | None = None

    def start(self, interval_minutes: float = 60) -> bool:
        """
        Agenda a varredura: executa agora e depois a cada `interval_minutes`.

        Deve ser chamado de dentro do event loop.

        Returns:
            False se já havia um job agendado (nenhum segundo timer é criado)
            ou se o intervalo não é positivo
        """
        if interval_minutes <= 0:
            logger.warning(f"Intervalo inválido para o job de expiração: {interval_minutes}")
            return False

        if self._ticker is not None:
            logger.warning("Job de expiração já está em execução")
            return False

        logger.info(
            f"Iniciando job de expiração (a cada {interval_minutes} minutos)"
        )
        self.interval_minutes = interval_minutes
        self._ticker = asyncio.get_running_loop().create_task(
            self._tick_loop(interval_minutes * 60),
            name="expiration-job",
        )
        return True

    def stop(self) -> bool:
        """
        Cancela os próximos ticks.

        Returns:
            False se não havia job agendado
        """
        if self._ticker is None:
            return False

        self._ticker.cancel()
        self._ticker = None
        self.interval_minutes = None
        logger.info("Job de expiração parado")
        return True

    def is_running(self) -> bool:
        """Indica se há um job agendado."""
        return self._ticker is not None

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_running

    def status(self) -> ExpirationJobStatus:
        return ExpirationJobStatus(
            running=self.is_running(),
            interval_minutes=self.interval_minutes,
            sweep_in_progress=self._sweep_running,
            last_run_at=self.last_run_at,
            last_expired_count=self.last_expired_count,
        )

    async def _tick_loop(self, interval_seconds: float) -> None:
        while True:
            self._fire()
            await asyncio.sleep(interval_seconds)

    def _fire(self) -> None:
        # A varredura roda numa task separada: cancelar o ticker não a interrompe
        task = asyncio.get_running_loop().create_task(self.run_once())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def run_once(self) -> ExpirationResult | None:
        """
        Executa uma varredura, a menos que outra já esteja em andamento.

        Returns:
            Resultado da varredura; None se o tick foi descartado ou falhou
        """
        # Checagem e marcação sem await entre elas: atômicas no event loop
        if self._sweep_running:
            logger.info("Varredura de expiração ainda em andamento, tick descartado")
            return None
        self._sweep_running = True

        try:
            logger.info("Executando varredura de expiração")
            result = await self._sweep()
        except Exception:
            logger.exception("Erro na varredura de expiração")
            return None
        finally:
            self._sweep_running = False
            self.last_run_at = self._clock()

        if result.success:
            self.last_expired_count = result.expired_count
            logger.info(f"Varredura concluída: {result.expired_count} reservas expiradas")
        else:
            logger.error(f"Varredura falhou: {result.error}")
        return result

    async def shutdown(self) -> None:
        """Para o job e aguarda varreduras em andamento."""
        self.stop()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)


# Instância global do processo
expiration_scheduler = ExpirationScheduler()
