"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class IndicatorSettings(BaseSettings):
    """Indicator window lengths and numeric floors.

    All fields configurable via INDICATOR_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="INDICATOR_")

    rsi_period: int = 14
    sma_short: int = 7
    sma_long: int = 21
    sma_deviation: int = 20  # baseline for mean-reversion deviation
    ema_fast: int = 12
    ema_slow: int = 26
    macd_signal: int = 9
    bollinger_period: int = 20
    bollinger_width: Decimal = Decimal("2")
    atr_period: int = 14
    atr_breakout_period: int = 14
    vwap_period: int = 7
    stoch_period: int = 14
    stoch_smooth: int = 3
    fibonacci_period: int = 30
    obv_period: int = 30
    volume_sma_short: int = 5
    volume_sma_long: int = 14
    pattern_lookback: int = 30
    short_momentum_window: int = 3
    atr_floor: Decimal = Decimal("0.01")


class RegimeSettings(BaseSettings):
    """Strategy selector thresholds and persistence guard.

    Controls the hysteresis (minimum trades/days before a switch) and the
    regime classification thresholds applied to 3-step feature averages.
    All fields configurable via REGIME_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="REGIME_")

    # Persistence guard
    persistence_trades: int = 3
    persistence_days: int = 5
    override_confidence: Decimal = Decimal("0.8")

    # EMA crossover windows
    ema_short_period: int = 10
    ema_long_period: int = 20

    # TrendFollowing / Momentum
    trend_slope_threshold: Decimal = Decimal("0.003")
    trend_strength_threshold: Decimal = Decimal("0.02")
    short_momentum_threshold: Decimal = Decimal("0.01")
    volatility_momentum_threshold: Decimal = Decimal("0.5")

    # Breakout
    breakout_threshold: Decimal = Decimal("1.2")
    idle_breakout_threshold: Decimal = Decimal("1.05")  # used after idle_days without a trade
    idle_days: int = 3
    volume_multiplier: Decimal = Decimal("1.2")

    # MeanReversion
    deviation_threshold: Decimal = Decimal("0.02")
    momentum_ceiling: Decimal = Decimal("0.03")


class RiskSettings(BaseSettings):
    """Execution frictions, global filters, and risk/sizing multipliers.

    All fields configurable via RISK_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="RISK_")

    # Frictions
    slippage: Decimal = Decimal("0.001")  # 0.1% of price
    commission: Decimal = Decimal("0.005")  # flat, quote currency

    # Global pre-filter
    min_confidence: Decimal = Decimal("0.3")
    max_atr_ratio: Decimal = Decimal("0.15")  # ATR relative to price

    # Stops and targets
    high_confidence: Decimal = Decimal("0.5")
    stop_loss_tighten: Decimal = Decimal("0.8")
    strong_momentum: Decimal = Decimal("0.06")
    trailing_tighten: Decimal = Decimal("0.8")
    profit_take_momentum: Decimal = Decimal("0.1")
    profit_take_boost: Decimal = Decimal("1.5")
    max_profit_take: Decimal = Decimal("4.0")
    min_profit_threshold: Decimal = Decimal("0.002")  # gain before trailing stop arms
    max_hold_days: int = 12

    # Entry filters
    min_profit_potential: Decimal = Decimal("0.02")
    min_trade_quality: Decimal = Decimal("0.25")

    # Position sizing (fractions of capital)
    base_position_size: Decimal = Decimal("0.1")
    high_atr_ratio: Decimal = Decimal("0.06")
    high_atr_max_size: Decimal = Decimal("0.3")
    trend_boost_slope: Decimal = Decimal("0.02")
    trend_boost: Decimal = Decimal("1.2")
    confidence_boost: Decimal = Decimal("1.5")
    win_streak_step: Decimal = Decimal("0.2")
    buy_prob_cap_multiplier: Decimal = Decimal("1.5")
    max_position_fraction: Decimal = Decimal("0.3")


class PredictorSettings(BaseSettings):
    """Model window configuration."""

    model_config = SettingsConfigDict(env_prefix="PREDICTOR_")

    timesteps: int = 35


class BacktestSettings(BaseSettings):
    """Backtest engine configuration.

    Controls default parameters for backtest runs including initial capital,
    warm-up length, and Sharpe annualization.
    All fields configurable via BACKTEST_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="BACKTEST_")

    default_initial_capital: Decimal = Decimal("10000")
    warmup_days: int = 50
    safety_margin_days: int = 5
    annualization_days: int = 365  # calendar days; crypto trades every day


class ExchangeSettings(BaseSettings):
    """Exchange connection settings for the live data/balance adapters."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    exchange_id: str = "coinbase"
    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    quote_currency: str = "USD"
    timeframe: str = "1d"
    sandbox: bool = False


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    indicators: IndicatorSettings = IndicatorSettings()
    regime: RegimeSettings = RegimeSettings()
    risk: RiskSettings = RiskSettings()
    predictor: PredictorSettings = PredictorSettings()
    backtest: BacktestSettings = BacktestSettings()
    exchange: ExchangeSettings = ExchangeSettings()
