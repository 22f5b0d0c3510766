"""CLI report — prints an analysis report to the console."""

from forecaster.pipeline import AnalysisReport


def _fmt_price(value) -> str:
    return f"${value:,.2f}" if value is not None else "N/A"


def format_report(report: AnalysisReport, strategy_key: str) -> str:
    """Format an ``AnalysisReport`` as a console block.

    Args:
        report: Output of ``run_analysis``.
        strategy_key: Registry key the signal was computed with.

    Returns:
        The formatted string.
    """
    summary = report.summary
    forecast = report.forecast
    last_rsi = report.indicators.rsi[-1] if report.indicators.rsi else None
    last_hist = report.indicators.macd.histogram[-1] if report.indicators.macd.histogram else None

    rsi_str = f"{last_rsi:.2f}" if last_rsi is not None else "N/A"
    hist_str = f"{last_hist:.4f}" if last_hist is not None else "N/A"
    forecast_str = (
        f"{_fmt_price(forecast[0].price)} → {_fmt_price(forecast[-1].price)} "
        f"({len(forecast) - 1} day(s))"
        if forecast else "none"
    )
    waves = report.elliott_waves
    waves_str = " ".join(w.direction for w in waves) if waves else "none"

    lines = [
        "──────────────── Forecaster Report ────────────────",
        f"  Signal:          {report.signal.value} ({strategy_key})",
        f"  Forecast:        {forecast_str}",
        f"  Volatility:      {summary.daily_volatility * 100:.2f}%"
        f" ({report.volatility.trend.direction})",
        f"  Bull / Bear:     +{summary.bullish_trend * 100:.2f}% / {summary.bearish_trend * 100:.2f}%",
        f"  RSI:             {rsi_str}",
        f"  MACD hist:       {hist_str}",
        f"  Patterns:        {', '.join(report.patterns) or 'none'}",
        f"  Elliott waves:   {waves_str}",
    ]
    for label, levels in (("Support", report.support_levels), ("Resistance", report.resistance_levels)):
        top = ", ".join(f"{_fmt_price(lv.price)} (x{lv.strength})" for lv in levels[:3])
        lines.append(f"  {label + ':':<17}{top or 'none'}")
    for fib in report.fibonacci:
        lines.append(f"  Fib {fib.level:<5}       {_fmt_price(fib.price)}")
    lines.append("──────────────────────────────────────────────────")
    return "\n".join(lines)


def print_report(report: AnalysisReport, strategy_key: str) -> str:
    """Format and print *report*; returns the printed string."""
    output = format_report(report, strategy_key)
    print(output)
    return output
