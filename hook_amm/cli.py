"""Command-line interface for quoting trades and running curve simulations."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from hook_amm.config import (
    BASELINE_SIMULATION,
    DEFAULT_SETTINGS,
    resolve_db_path,
    resolve_log_level,
    resolve_settings,
)
from hook_amm.core.errors import HookAmmError
from hook_amm.core.fees import compute_fee
from hook_amm.core.pricing import price_impact_bps, quote_buy, quote_sell, spot_price
from hook_amm.core.state import ReserveState
from hook_amm.log_setup import setup_logging
from hook_amm.market.simulator import setup_simulation
from hook_amm.market.visualizations import create_price_chart
from hook_amm.storage.database import SQLiteCurveStore


def quote_command(args: argparse.Namespace) -> int:
    """Price a single trade against the given reserves without executing it."""
    settings = resolve_settings()
    state = ReserveState(
        mint="QUOTE",
        creator="",
        virtual_token_reserves=args.virtual_token,
        virtual_sol_reserves=args.virtual_sol,
        real_token_reserves=args.real_token,
        real_sol_reserves=args.real_sol,
        token_total_supply=settings.initial_supply,
        complete=False,
        index=0,
    )
    quote_reserves = state.effective_sol_reserves
    token_reserves = state.effective_token_reserves

    if args.side == "buy":
        fee, net = compute_fee(args.amount, settings.fee_basis_points)
        tokens_out = quote_buy(net, quote_reserves, token_reserves)
        impact = price_impact_bps(net, tokens_out, quote_reserves, token_reserves)
        after = spot_price(quote_reserves + net, token_reserves - tokens_out)
        print(f"Buy with {args.amount} lamports")
        print(f"  Fee:          {fee}")
        print(f"  Net in:       {net}")
        print(f"  Tokens out:   {tokens_out}")
    else:
        sol_out = quote_sell(args.amount, token_reserves, quote_reserves)
        fee, net = compute_fee(sol_out, settings.fee_basis_points)
        impact = price_impact_bps(args.amount, sol_out, token_reserves, quote_reserves)
        after = spot_price(quote_reserves - sol_out, token_reserves + args.amount)
        print(f"Sell {args.amount} tokens")
        print(f"  Gross out:    {sol_out}")
        print(f"  Fee:          {fee}")
        print(f"  Net out:      {net}")

    print(f"  Price impact: {impact:.2f} bps")
    print(f"  Spot price:   {state.spot_price:.6e} -> {after:.6e} lamports/token")
    return 0


def simulate_command(args: argparse.Namespace) -> int:
    """Run retail flow against a fresh curve and print a summary."""
    settings = resolve_settings()
    sim = replace(
        BASELINE_SIMULATION,
        n_steps=args.steps if args.steps is not None else BASELINE_SIMULATION.n_steps,
        arrival_rate=(
            args.arrival_rate if args.arrival_rate is not None else BASELINE_SIMULATION.arrival_rate
        ),
        mean_buy_lamports=(
            args.mean_size if args.mean_size is not None else BASELINE_SIMULATION.mean_buy_lamports
        ),
        buy_prob=args.buy_prob if args.buy_prob is not None else BASELINE_SIMULATION.buy_prob,
    )

    db_path = args.db if args.db is not None else resolve_db_path()
    store = SQLiteCurveStore(db_path) if db_path else None
    # Each run opens a new curve; name it after the curves already persisted
    mint = f"SIM-{len(store.list_curves())}" if store is not None else "SIMTOKEN"

    print(f"Running {sim.n_steps} steps against {mint}...")
    simulation = setup_simulation(settings, sim, seed=args.seed, store=store, events=store, mint=mint)
    result = simulation.run(sim.n_steps)

    summary = result.summary()
    print(f"\nTrades:        {summary['trades']} ({summary['buys']} buys, {summary['sells']} sells)")
    print(f"Rejected:      {summary['rejected']}")
    for reason, count in sorted(result.rejected.items()):
        print(f"  - {reason}: {count}")
    print(f"Fees:          {summary['fees_collected']} lamports")
    print(f"Real SOL:      {summary['real_sol_reserves']}")
    print(f"Real tokens:   {summary['real_token_reserves']}")
    print(f"Spot price:    {summary['spot_price']:.6e} ({summary['price_change']:+.2%})")
    if summary["complete"]:
        print("Curve completed during the run")

    if args.csv:
        Path(args.csv).parent.mkdir(parents=True, exist_ok=True)
        result.history.to_csv(args.csv, index=False)
        print(f"History written to {args.csv}")
    if args.chart:
        fig = create_price_chart(result.history, title=f"{mint} Spot Price")
        fig.write_html(args.chart)
        print(f"Chart written to {args.chart}")
    if store is not None:
        print(f"Curve saved to {store.db_path}")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Bonding curve exchange - quote trades and simulate retail flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hook-amm quote buy 1000000000
  hook-amm quote sell 5000000000000 --real-sol 2000000000 --real-token 60000000000000
  hook-amm simulate --steps 500 --seed 7 --csv out/history.csv --chart out/price.html
        """,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to HOOK_AMM_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Quote command
    quote_parser = subparsers.add_parser("quote", help="Price a trade without executing it")
    quote_parser.add_argument("side", choices=["buy", "sell"], help="Trader side")
    quote_parser.add_argument(
        "amount", type=int, help="Lamports to spend (buy) or tokens to sell (sell)"
    )
    quote_parser.add_argument(
        "--virtual-sol",
        type=int,
        default=DEFAULT_SETTINGS.virtual_sol_reserves,
        help="Virtual SOL reserves in lamports",
    )
    quote_parser.add_argument(
        "--virtual-token",
        type=int,
        default=DEFAULT_SETTINGS.virtual_token_reserves,
        help="Virtual token reserves",
    )
    quote_parser.add_argument(
        "--real-sol", type=int, default=0, help="Real SOL reserves in lamports"
    )
    quote_parser.add_argument(
        "--real-token", type=int, default=0, help="Tokens sold by the curve so far"
    )
    quote_parser.set_defaults(func=quote_command)

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Run retail flow against a new curve")
    sim_parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Time steps to simulate (defaults to shared baseline config)",
    )
    sim_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sim_parser.add_argument(
        "--arrival-rate",
        type=float,
        default=None,
        help="Retail arrival rate per step (defaults to shared baseline config)",
    )
    sim_parser.add_argument(
        "--mean-size",
        type=float,
        default=None,
        help="Mean buy size in lamports (defaults to shared baseline config)",
    )
    sim_parser.add_argument(
        "--buy-prob",
        type=float,
        default=None,
        help="Probability that an order is a buy (defaults to shared baseline config)",
    )
    sim_parser.add_argument(
        "--db", default=None, help="SQLite database to persist curves and trades"
    )
    sim_parser.add_argument("--csv", default=None, help="Write trade history to a CSV file")
    sim_parser.add_argument("--chart", default=None, help="Write a price chart to an HTML file")
    sim_parser.set_defaults(func=simulate_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.log_level or resolve_log_level())

    try:
        return args.func(args)
    except HookAmmError as e:
        print(f"Error: {e} (code {e.code})")
        return 1


if __name__ == "__main__":
    sys.exit(main())
