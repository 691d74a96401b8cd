"""Single live decision step.

Each tick:
  1. Bootstrap capital and holdings from the exchange balances.
  2. Fetch aligned daily history for the primary and reference symbols.
  3. Predictor -> TradeDecisionEngine, exactly once.
  4. Notify when a trade is emitted.

The emitted Trade is returned to the caller; no order is placed here.
PositionState and StrategyState are owned by the caller and must not be
shared with a backtest run.
"""

from trader.decision.engine import Decision, TradeDecisionEngine
from trader.exchange.client import TradeExecutor
from trader.exchange.types import MarketDataRequest
from trader.live.notifier import Notifier
from trader.logging import get_logger
from trader.models import PositionState, Trade
from trader.signals.predictor import Predictor
from trader.strategy.models import StrategyState

logger = get_logger(__name__)


def format_trade_message(symbol: str, trade: Trade) -> str:
    """Human-readable one-line trade summary."""
    strategy = trade.strategy.value if trade.strategy is not None else "n/a"
    return (
        f"{trade.trade_type.value.upper()} {symbol}: {trade.asset_amount} @ {trade.price} "
        f"(value {trade.usd_value}, strategy {strategy}, confidence {trade.confidence})"
    )


class LiveTrader:
    """Runs the decision engine once per call against live market data.

    Args:
        symbol: Traded pair, e.g. "BTC/USD".
        reference_symbol: Correlated pair fed to the predictor.
        executor: Read-only exchange access.
        predictor: Prediction source.
        decision_engine: Decision logic.
        notifier: Side channel for emitted trades.
        history_days: Daily bars requested per symbol.
        timeframe: Candle timeframe passed to the executor.
    """

    def __init__(
        self,
        symbol: str,
        reference_symbol: str,
        executor: TradeExecutor,
        predictor: Predictor,
        decision_engine: TradeDecisionEngine,
        notifier: Notifier,
        history_days: int = 100,
        timeframe: str = "1d",
    ) -> None:
        self._symbol = symbol
        self._reference_symbol = reference_symbol
        self._executor = executor
        self._predictor = predictor
        self._decision_engine = decision_engine
        self._notifier = notifier
        self._history_days = history_days
        self._timeframe = timeframe

    async def run_once(
        self,
        position: PositionState,
        strategy_state: StrategyState,
    ) -> Decision:
        """Make one decision for the latest bar.

        Holdings on ``position`` are overwritten with the exchange balance.
        Holdings with no recorded entry are adopted at the current price and
        the latest bar time, so hold-time exits can fire on later ticks.
        Strategy state is advanced by the selector.

        Raises:
            ExchangeError: On exchange failures.
            SeriesMismatchError: If the two histories are not aligned.
            PredictionError: When the predictor fails.
        """
        balances = await self._executor.get_account_balances(self._symbol)
        position.holdings = balances.holdings

        primary = await self._executor.get_market_data(
            MarketDataRequest(self._symbol, self._history_days, self._timeframe)
        )
        reference = await self._executor.get_market_data(
            MarketDataRequest(self._reference_symbol, self._history_days, self._timeframe)
        )
        primary.check_aligned(reference)

        current_price = await self._executor.get_current_price(self._symbol)
        if position.is_open and position.buy_timestamp_ms is None:
            position.adopt(current_price, primary.timestamps_ms[-1])
            logger.warning(
                "untracked_holdings_adopted",
                symbol=self._symbol,
                holdings=str(position.holdings),
                buy_price=str(position.last_buy_price),
                buy_timestamp_ms=position.buy_timestamp_ms,
            )
        if position.is_open:
            position.update_peak(current_price)

        prediction = await self._predictor.predict(
            primary.prices, primary.volumes, reference.prices, reference.volumes
        )
        decision = self._decision_engine.decide(
            prediction,
            position,
            strategy_state,
            balances.capital,
            primary.prices,
            primary.volumes,
            primary.timestamps_ms[-1],
        )

        logger.info(
            "live_decision",
            symbol=self._symbol,
            current_price=str(current_price),
            capital=str(balances.capital),
            holdings=str(balances.holdings),
            strategy=decision.strategy.value if decision.strategy is not None else None,
            reason=decision.reason,
            confidence=str(decision.confidence),
        )

        if decision.trade is not None:
            await self._notify(format_trade_message(self._symbol, decision.trade))
        return decision

    async def _notify(self, message: str) -> None:
        try:
            await self._notifier.send(message)
        except Exception as e:
            logger.warning("notification_failed", symbol=self._symbol, error=str(e))

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def history_days(self) -> int:
        return self._history_days
