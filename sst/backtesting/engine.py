"""Backtesting engine — synchronous day-by-day SST strategy simulation.

Replays a symbol's daily bars through the SST entry rule (20-day low touch,
then 20-day high breakout) with pyramided re-entries and target-based exits,
tracking cash, open lots, and a marked-to-market daily ledger.

Per-day processing order (window = the 20 bars before the day):
    1. Exits, touched by the day's high (see exits.py)
    2. Cycle reset when no lots remain
    3. Entry: arm on a window-low touch, buy on a window-high breakout
    4. End-of-day mark-to-market, drawdown tracking, ledger entry

The engine is entirely synchronous — bars are in memory and no I/O occurs
during simulation, so symbols can be run independently in parallel.

Usage:
    from sst.backtesting.engine import run_backtest

    result = run_backtest("TCS.NS", bars, initial_capital=500_000)  # None if < 21 bars
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from pydantic import ValidationError

from sst.backtesting.exits import independent_exits, weighted_average_exit
from sst.backtesting.metrics import (
    compute_cagr,
    compute_win_stats,
    fill_day_profit,
    years_between,
)
from sst.backtesting.schemas import (
    BacktestConfig,
    BacktestResult,
    ClosedTrade,
    DailyLedgerEntry,
    ExitStrategy,
    Lot,
    OpenPosition,
    TradeActivity,
)
from sst.common.exceptions import InvalidParameterError
from sst.common.logging import get_logger
from sst.common.schemas import DailyBar
from sst.strategy.signals import LOOKBACK_DAYS, MIN_BARS, window_levels
from sst.strategy.targets import TargetPolicy, resolve_target_percent

logger = get_logger("BACKTEST")


@dataclass
class _RunState:
    """Mutable trading state carried across the day loop."""

    cash: float
    max_equity: float
    is_tracking: bool = False
    sequence_number: int = 0
    max_drawdown: float = 0.0
    lots: list[Lot] = field(default_factory=list)
    trades: list[ClosedTrade] = field(default_factory=list)
    ledger: list[DailyLedgerEntry] = field(default_factory=list)


def run_backtest(
    symbol: str,
    bars: Sequence[DailyBar],
    initial_capital: float = 500_000.0,
    per_trade_amount: float | None = None,
    exit_strategy: ExitStrategy = "WEIGHTED_AVERAGE",
    target_profit_percent: float = 6.0,
    max_pyramid_levels: int = 3,
    target_policy: TargetPolicy = "FLAT",
) -> BacktestResult | None:
    """Run the SST strategy over one symbol's history.

    Args:
        symbol: Stock symbol.
        bars: Daily bars sorted by date ascending, gap-filled.
        initial_capital: Starting cash.
        per_trade_amount: Capital per entry (default: initial_capital / 50).
        exit_strategy: WEIGHTED_AVERAGE or LIFO (independent per-lot exits).
        target_profit_percent: Target used by the FLAT target policy.
        max_pyramid_levels: Max entries per cycle (1 initial + re-entries).
        target_policy: FLAT (one target for all entries) or TIERED (10/8/6%).

    Returns:
        BacktestResult, or None when fewer than 21 bars are supplied.

    Raises:
        InvalidParameterError: If any parameter is out of range.
    """
    config = build_config(
        initial_capital=initial_capital,
        per_trade_amount=per_trade_amount,
        exit_strategy=exit_strategy,
        target_profit_percent=target_profit_percent,
        max_pyramid_levels=max_pyramid_levels,
        target_policy=target_policy,
    )
    return simulate(symbol, bars, config)


def build_config(**params) -> BacktestConfig:
    """Validate strategy parameters up front.

    Raises:
        InvalidParameterError: With the pydantic error list in its context.
    """
    try:
        return BacktestConfig(**params)
    except ValidationError as exc:
        raise InvalidParameterError(
            "Invalid backtest parameters",
            context={"errors": exc.errors(include_url=False)},
        ) from exc


def simulate(symbol: str, bars: Sequence[DailyBar], config: BacktestConfig) -> BacktestResult | None:
    """Run the day-by-day simulation with a validated config.

    Returns:
        BacktestResult, or None when fewer than 21 bars are supplied.
    """
    if len(bars) < MIN_BARS:
        return None

    trade_amount = config.trade_amount
    state = _RunState(cash=config.initial_capital, max_equity=config.initial_capital)

    for i in range(LOOKBACK_DAYS, len(bars)):
        day = bars[i]
        levels = window_levels(bars, i)
        activities: list[TradeActivity] = []

        # -- 1. Exits (target touched by the day's high) --
        if config.exit_strategy == "WEIGHTED_AVERAGE":
            exits = weighted_average_exit(state.lots, day.high)
        else:
            exits = independent_exits(state.lots, day.high)

        for idx, exit_price in exits:
            activities.append(_close_lot(state, symbol, state.lots[idx], day.date, exit_price))
        closed = {idx for idx, _ in exits}
        state.lots = [lot for idx, lot in enumerate(state.lots) if idx not in closed]

        # -- 2. Cycle reset: a fresh setup is required once everything is sold --
        if not state.lots and state.sequence_number > 0:
            state.sequence_number = 0
            state.is_tracking = False

        # -- 3. Entry --
        if day.low <= levels.low:
            state.is_tracking = True

        if state.is_tracking and day.high > levels.high:
            if state.sequence_number < config.max_pyramid_levels:
                activity = _attempt_entry(state, symbol, day.date, levels.high, trade_amount, config)
                if activity is not None:
                    activities.append(activity)
            # Re-arming needs a new window-low touch, whether we bought or not
            state.is_tracking = False

        # -- 4. End-of-day accounting (mark to market at the close) --
        invested = sum(lot.quantity * day.close for lot in state.lots)
        equity = state.cash + invested

        if equity > state.max_equity:
            state.max_equity = equity
        drawdown = (state.max_equity - equity) / state.max_equity * 100
        if drawdown > state.max_drawdown:
            state.max_drawdown = drawdown

        state.ledger.append(
            DailyLedgerEntry(
                date=day.date,
                cash=state.cash,
                invested=invested,
                equity=equity,
                activities=activities,
            )
        )

    fill_day_profit(state.ledger)
    result = _build_result(symbol, bars, config, state)

    logger.debug(
        "Backtest finished",
        extra={
            "data": {
                "symbol": symbol,
                "days": len(state.ledger),
                "trades": result.total_trades,
                "open_positions": len(result.open_positions),
                "total_profit": round(result.total_profit, 2),
            }
        },
    )
    return result


def _close_lot(
    state: _RunState, symbol: str, lot: Lot, exit_date: date, exit_price: float
) -> TradeActivity:
    """Realize a lot at exit_price: credit cash, record the trade, return the SELL activity."""
    profit = (exit_price - lot.entry_price) * lot.quantity
    profit_percent = (exit_price - lot.entry_price) / lot.entry_price * 100
    holding_days = (exit_date - lot.entry_date).days

    state.trades.append(
        ClosedTrade(
            symbol=symbol,
            entry_date=lot.entry_date,
            entry_price=lot.entry_price,
            exit_date=exit_date,
            exit_price=exit_price,
            sequence_number=lot.sequence_number,
            target_percent=lot.target_percent,
            profit=profit,
            profit_percent=profit_percent,
            holding_days=holding_days,
        )
    )
    state.cash += lot.quantity * exit_price

    return TradeActivity(
        symbol=symbol,
        type="SELL",
        price=exit_price,
        quantity=lot.quantity,
        amount=lot.quantity * exit_price,
        sequence_number=lot.sequence_number,
        date=exit_date,
        profit=profit,
        holding_days=holding_days,
        reference_entry_date=lot.entry_date,
    )


def _attempt_entry(
    state: _RunState,
    symbol: str,
    entry_date: date,
    breakout_price: float,
    trade_amount: float,
    config: BacktestConfig,
) -> TradeActivity | None:
    """Open the next pyramid level at the breakout price if cash allows.

    The sequence number advances even when the entry is skipped or sized to
    zero shares.

    Returns:
        BUY or SKIPPED activity, or None when the trade amount buys no shares.
    """
    state.sequence_number += 1
    target_percent = resolve_target_percent(
        state.sequence_number, config.target_policy, config.target_profit_percent
    )
    quantity = math.floor(trade_amount / breakout_price)
    cost = quantity * breakout_price

    if quantity <= 0:
        return None

    if state.cash < cost:
        logger.debug(
            "Entry skipped: insufficient cash",
            extra={
                "data": {
                    "symbol": symbol,
                    "date": entry_date,
                    "cash": round(state.cash, 2),
                    "required": round(cost, 2),
                }
            },
        )
        return TradeActivity(
            symbol=symbol,
            type="SKIPPED",
            price=breakout_price,
            quantity=0,
            amount=0.0,
            sequence_number=state.sequence_number,
            date=entry_date,
        )

    state.cash -= cost
    state.lots.append(
        Lot(
            entry_date=entry_date,
            entry_price=breakout_price,
            quantity=quantity,
            sequence_number=state.sequence_number,
            target_percent=target_percent,
        )
    )
    return TradeActivity(
        symbol=symbol,
        type="BUY",
        price=breakout_price,
        quantity=quantity,
        amount=cost,
        sequence_number=state.sequence_number,
        date=entry_date,
    )


def _build_result(
    symbol: str,
    bars: Sequence[DailyBar],
    config: BacktestConfig,
    state: _RunState,
) -> BacktestResult:
    """Value open lots at the last close and compute the summary statistics."""
    last_price = bars[-1].close
    start_date = bars[LOOKBACK_DAYS].date
    end_date = bars[-1].date

    open_positions = []
    for lot in state.lots:
        current_value = lot.quantity * last_price
        pnl = current_value - lot.cost_basis
        open_positions.append(
            OpenPosition(
                entry_date=lot.entry_date,
                entry_price=lot.entry_price,
                quantity=lot.quantity,
                sequence_number=lot.sequence_number,
                target_percent=lot.target_percent,
                current_price=last_price,
                current_value=current_value,
                pnl=pnl,
                pnl_percent=pnl / lot.cost_basis * 100,
            )
        )

    realized_profit = sum(t.profit for t in state.trades)
    unrealized_profit = sum(p.pnl for p in open_positions)
    blocked_capital = sum(lot.cost_basis for lot in state.lots)

    final_capital = state.cash + sum(p.current_value for p in open_positions)
    total_profit = final_capital - config.initial_capital
    winning, losing, win_rate = compute_win_stats(state.trades)

    return BacktestResult(
        symbol=symbol,
        start_date=start_date,
        end_date=end_date,
        initial_capital=config.initial_capital,
        final_capital=final_capital,
        total_trades=len(state.trades),
        winning_trades=winning,
        losing_trades=losing,
        win_rate=win_rate,
        total_profit=total_profit,
        total_profit_percent=total_profit / config.initial_capital * 100,
        cagr=compute_cagr(
            config.initial_capital, final_capital, years_between(start_date, end_date)
        ),
        realized_profit=realized_profit,
        unrealized_profit=unrealized_profit,
        blocked_capital=blocked_capital,
        max_drawdown=state.max_drawdown,
        trades=state.trades,
        open_positions=open_positions,
        daily_log=state.ledger,
    )
