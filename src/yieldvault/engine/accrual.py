"""Exchange rate accrual engine - lazy, time-driven growth of asset-per-share."""

from dataclasses import dataclass

from ..exceptions import InvalidAmountError
from ..logging_config import get_logger
from .fixed_point import SCALE, checked_add, checked_mul, mul_div_down

logger = get_logger(__name__)


@dataclass
class AccrualState:
    """Rate/timestamp pair owned by the accrual engine.

    exchange_rate: asset units per share, scaled by SCALE (starts at SCALE)
    rate_per_second: growth coefficient, scaled by SCALE
    last_accrual_timestamp: seconds of the last rate update
    """
    exchange_rate: int
    rate_per_second: int
    last_accrual_timestamp: int


class ExchangeRateAccrual:
    """Keeps the exchange rate current with elapsed time.

    Growth rule for an interval of dt seconds:

        delta = floor(exchange_rate * rate_per_second * dt / SCALE)

    Each call applies simple growth to the already-grown rate, so frequent
    calls approach continuous compounding while one call over a long gap
    applies a single linear increment for the whole gap.
    """

    def __init__(self, rate_per_second: int, start_timestamp: int, exchange_rate: int = SCALE):
        """
        Initialize accrual engine.

        Args:
            rate_per_second: Per-second growth coefficient scaled by SCALE
            start_timestamp: Timestamp the rate is current as of
            exchange_rate: Starting rate (SCALE = 1:1)
        """
        _require_rate(rate_per_second)
        if exchange_rate < SCALE:
            raise ValueError(f"exchange_rate must be at least SCALE, got {exchange_rate}")
        self.state = AccrualState(
            exchange_rate=exchange_rate,
            rate_per_second=rate_per_second,
            last_accrual_timestamp=start_timestamp,
        )

    @property
    def exchange_rate(self) -> int:
        return self.state.exchange_rate

    @property
    def rate_per_second(self) -> int:
        return self.state.rate_per_second

    @property
    def last_accrual_timestamp(self) -> int:
        return self.state.last_accrual_timestamp

    def compute_delta(self, dt: int) -> int:
        """
        Growth of the stored rate over dt seconds.

        Raises:
            ArithmeticOverflowError: If the three-term product overflows
        """
        if dt <= 0:
            return 0
        product = checked_mul(self.state.exchange_rate, self.state.rate_per_second)
        return mul_div_down(product, dt, SCALE)

    def pending_rate(self, now: int) -> int:
        """Rate that accrue(now) would produce, without mutating state."""
        dt = now - self.state.last_accrual_timestamp
        return checked_add(self.state.exchange_rate, self.compute_delta(dt))

    def accrue(self, now: int) -> int:
        """
        Bring the exchange rate up to now.

        A zero dt is a no-op. A positive dt always advances the timestamp,
        even when the delta floors to zero.

        Args:
            now: Current timestamp in seconds

        Returns:
            Amount the exchange rate grew by
        """
        last = self.state.last_accrual_timestamp
        dt = now - last
        if dt == 0:
            return 0
        if dt < 0:
            logger.warning(
                "Clock behind last accrual; treating as no elapsed time",
                extra={"event": "accrual.clock_regression", "now": now, "last_accrual": last},
            )
            return 0

        delta = self.compute_delta(dt)
        self.state.exchange_rate = checked_add(self.state.exchange_rate, delta)
        self.state.last_accrual_timestamp = now

        logger.debug(
            "Exchange rate accrued",
            extra={
                "event": "accrual.accrued",
                "dt": dt,
                "delta": delta,
                "exchange_rate": self.state.exchange_rate,
            },
        )
        return delta

    def set_rate_per_second(self, new_rate: int) -> int:
        """Replace the growth coefficient and return the old one."""
        _require_rate(new_rate)
        old_rate = self.state.rate_per_second
        self.state.rate_per_second = new_rate
        return old_rate

    def snapshot(self) -> AccrualState:
        return AccrualState(**vars(self.state))

    def restore(self, snapshot: AccrualState) -> None:
        self.state = AccrualState(**vars(snapshot))


def _require_rate(rate: int) -> None:
    if isinstance(rate, bool) or not isinstance(rate, int) or rate < 0:
        raise InvalidAmountError(rate, what="rate_per_second")
