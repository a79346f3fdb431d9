"""CLI for the Architecture Referee.

Provides a command-line interface for comparing the IRM-Heavy, URM-Heavy
and Hybrid security architectures against an organization's constraints.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from .config import save_default_config
from .engine import RefereeEngine, session_summary
from .exceptions import InvalidConfigError, InvalidModificationError
from .profiles import get_all_architecture_profiles, get_all_dimension_analyses
from .schema import (
    AnalysisResult,
    ArchitectureType,
    AssumptionCategory,
    ConflictWarning,
    ImpactAnalysis,
    ENGINE_VERSION,
)

console = Console()

CONFIDENCE_COLORS = {
    "High": "green",
    "Medium": "yellow",
    "Low": "red",
}


def constraint_options(func):
    """Attach one option per constraint, plus --input for a JSON file."""
    options = [
        click.option("--risk-tolerance", "-r", type=float, help="Risk tolerance 1-10 (10 = very low tolerance)"),
        click.option("--compliance-strictness", "-c", type=float, help="Compliance strictness 1-10"),
        click.option("--cost-sensitivity", "-s", type=float, help="Cost sensitivity 1-10"),
        click.option("--user-experience-priority", "-u", type=float, help="User experience priority 1-10"),
        click.option("--operational-maturity", "-m", type=float, help="Operational maturity 1-10"),
        click.option("--business-agility", "-b", type=float, help="Business agility 1-10"),
        click.option(
            "--input", "-i", "input_file",
            type=click.Path(exists=True),
            help="JSON file with constraint values (options override file values)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def collect_constraints(input_file: Optional[str], **values: Optional[float]) -> dict[str, Any]:
    """Merge constraint values from a JSON file and command-line options."""
    raw: dict[str, Any] = {}
    if input_file:
        with open(input_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise click.BadParameter("Constraint file must contain a JSON object", param_hint="--input")
        raw.update(data)

    for name, value in values.items():
        if value is not None:
            # Keep whole numbers as int so they validate as integers
            raw[name] = int(value) if float(value).is_integer() else value
    return raw


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.version_option(version=ENGINE_VERSION, prog_name="architecture-referee")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to a referee-config.yaml file"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable debug logging"
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool):
    """Architecture Referee.

    Compares identity-centric (IRM-Heavy), behavior-centric (URM-Heavy) and
    Hybrid security architectures against your organizational constraints,
    and explains the trade-offs instead of picking a winner for you.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _engine(ctx: click.Context) -> RefereeEngine:
    try:
        return RefereeEngine.from_config_file(ctx.obj.get("config_path"))
    except InvalidConfigError as e:
        raise click.ClickException(f"Invalid configuration: {e}")


@main.command("analyze")
@constraint_options
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.pass_context
def analyze_cmd(ctx: click.Context, input_file: Optional[str], out: Optional[str], json_output: bool, **values):
    """Score the three architectures against your constraints.

    Missing constraints default to 5 and are disclosed as assumptions.

    Examples:
        architecture-referee analyze -r 7 -c 9 -s 4 -u 6 -m 5 -b 5
        architecture-referee analyze -i constraints.json -j
    """
    try:
        raw = collect_constraints(input_file, **values)
        result = _engine(ctx).analyze(raw)

        if json_output:
            output_json(result, out)
        else:
            display_analysis(result, ctx.obj.get("verbose", False))
            if out:
                output_json(result, out)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("conflicts")
@constraint_options
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.pass_context
def conflicts_cmd(ctx: click.Context, input_file: Optional[str], json_output: bool, **values):
    """Show conflicting priorities in a constraint profile."""
    try:
        engine = _engine(ctx)
        processing = engine.validate_and_build_profile(collect_constraints(input_file, **values))
        result = engine.detect_conflicts(processing.profile)

        if json_output:
            print(result.model_dump_json(indent=2))
            return

        if not processing.validation.is_valid:
            console.print("[yellow]Input had validation errors; checking the default profile instead.[/yellow]\n")

        if not result.has_conflicts:
            console.print("[green]No constraint conflicts detected.[/green]")
            return

        console.print(f"\n[bold]Constraint Conflicts ({len(result.conflicts)}):[/bold]\n")
        for conflict in result.conflicts:
            display_conflict(conflict)

    except click.ClickException:
        raise
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("profiles")
@click.option(
    "--architecture", "-a",
    type=click.Choice([t.value for t in ArchitectureType], case_sensitive=False),
    help="Show details for one architecture"
)
@click.option(
    "--dimensions", "-d",
    is_flag=True,
    help="Explain each quality dimension"
)
def profiles_cmd(architecture: Optional[str], dimensions: bool):
    """Show the architecture score matrix and profile details."""
    profiles = get_all_architecture_profiles()

    if dimensions:
        for analysis in get_all_dimension_analyses():
            tree = Tree(f"[bold cyan]{analysis.dimension.value}[/bold cyan]")
            tree.add(f"Why it matters: {analysis.why_it_matters}")
            tree.add(f"Trade-offs: {analysis.tradeoffs}")
            tree.add(f"Over-optimization risks: {analysis.over_optimization_risks}")
            comparison = tree.add("[bold]Architectures[/bold]")
            for arch, (score, rationale) in analysis.architecture_comparison.items():
                comparison.add(f"{arch.value} ({score}): {rationale}")
            console.print(tree)
            console.print()
        return

    if architecture:
        profile = next(p for p in profiles if p.architecture_type.value.lower() == architecture.lower())
        tree = Tree(f"[bold cyan]{profile.architecture_type.value}[/bold cyan]")
        for label, items in (
            ("Strengths", profile.strengths),
            ("Weaknesses", profile.weaknesses),
            ("Risks", profile.risks),
        ):
            branch = tree.add(f"[bold]{label}[/bold]")
            for item in items:
                branch.add(item)
        scores = tree.add("[bold]Base Scores[/bold]")
        for dimension, score in profile.base_scores.as_dict().items():
            scores.add(f"{dimension.value}: {score} - {profile.scoring_rationale[dimension]}")
        console.print(tree)
        return

    table = Table(show_header=True, header_style="bold", title="Architecture Score Matrix")
    table.add_column("Dimension", style="cyan")
    for profile in profiles:
        table.add_column(profile.architecture_type.value, justify="right")

    for dimension in profiles[0].base_scores.as_dict():
        table.add_row(dimension.value, *(str(p.base_scores.get(dimension)) for p in profiles))

    console.print(table)


@main.command("explore")
@constraint_options
@click.option(
    "--set", "changes",
    multiple=True,
    required=True,
    help="Constraint change to apply (format: field=value), repeatable"
)
@click.option(
    "--revert-to",
    type=int,
    help="After applying changes, revert to this step (0-based)"
)
@click.pass_context
def explore_cmd(
    ctx: click.Context,
    input_file: Optional[str],
    changes: tuple,
    revert_to: Optional[int],
    **values,
):
    """See how changing constraints moves the results.

    Examples:
        architecture-referee explore -c 9 -s 9 --set cost_sensitivity=5
        architecture-referee explore --set risk_tolerance=2 --set user_experience_priority=9
    """
    engine = _engine(ctx)
    processing = engine.validate_and_build_profile(collect_constraints(input_file, **values))
    modifier = engine.start_session(processing.profile)

    parsed = []
    for change in changes:
        if "=" not in change:
            raise click.BadParameter(f"Expected field=value, got: {change}", param_hint="--set")
        field, value = change.split("=", 1)
        try:
            parsed.append((field.strip(), float(value.strip()), "command line"))
        except ValueError:
            raise click.BadParameter(f"Value must be numeric: {change}", param_hint="--set")

    try:
        impacts = modifier.batch_modify_constraints(
            (field, int(value) if value.is_integer() else value, reason)
            for field, value, reason in parsed
        )
    except InvalidModificationError as e:
        console.print(f"[red]Invalid modification:[/red] {e}")
        sys.exit(1)

    for step, impact in enumerate(impacts):
        display_impact(impact, f"Step {step}")

    if revert_to is not None:
        try:
            display_impact(modifier.revert_to_step(revert_to), f"Revert to step {revert_to}")
        except InvalidModificationError as e:
            console.print(f"[red]Invalid revert:[/red] {e}")
            sys.exit(1)

    display_impact(modifier.compare_with_initial(), "Overall change from initial")

    summary = session_summary(modifier.end_session())
    console.print(
        f"[dim]Session {summary['session_id']}: {summary['modifications']} modification(s), "
        f"{summary['similarity']}% similar to the starting constraints[/dim]"
    )


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="referee-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default referee configuration file.

    Example:
        architecture-referee init-config --out my-config.yaml
    """
    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
        console.print(f"[green]✓[/green] Config file created: {out}")
        console.print("\nThis file configures:")
        console.print("  • near_tie - When score gaps count as a tie")
        console.print("  • confidence - Penalties and thresholds for High/Medium/Low confidence")
        console.print("  • defaults - Values assumed for constraints that are not supplied")
        console.print("\nThe referee will look for config in this order:")
        console.print("  1. ARCHITECTURE_REFEREE_CONFIG environment variable")
        console.print("  2. ./referee-config.yaml (current directory)")
        console.print("  3. ~/.config/architecture-referee/config.yaml")
    except Exception as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)


# =============================================================================
# Display helpers
# =============================================================================


def display_analysis(result: AnalysisResult, verbose: bool):
    """Display an analysis result in formatted text."""
    if not result.validation.is_valid:
        console.print("[bold red]Input errors (all constraints defaulted):[/bold red]")
        for error in result.validation.errors:
            console.print(f"  [red]•[/red] {error.message}")
        console.print()

    near_tie = result.near_tie_detection
    confidence = result.overall_confidence.value
    color = CONFIDENCE_COLORS.get(confidence, "white")
    headline = (
        f"Clear leader: [bold cyan]{near_tie.clear_winner.value}[/bold cyan]"
        if near_tie.clear_winner
        else f"[bold yellow]{near_tie.messaging.primary_message}[/bold yellow]"
    )
    console.print(Panel(
        f"{headline}\n"
        f"Confidence: [{color}]{confidence}[/{color}]\n"
        f"Top-two gap: {near_tie.score_difference:.2f} (threshold {near_tie.threshold_used})",
        title="Architecture Comparison",
    ))

    if result.is_fallback:
        console.print("[bold red]⚠ Manual evaluation required: part of the analysis used fallback results[/bold red]")
        for info in result.fallback_details:
            console.print(f"  [red]•[/red] {info.component}: {info.reason}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Rank", justify="right")
    table.add_column("Architecture", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Confidence")
    for rank, score in enumerate(result.architecture_scores, 1):
        level = score.confidence_level.value
        table.add_row(
            str(rank),
            score.architecture_type.value,
            f"{score.weighted_score:.2f}",
            f"[{CONFIDENCE_COLORS[level]}]{level}[/{CONFIDENCE_COLORS[level]}]",
        )
    console.print(table)

    if result.tradeoff_summary.key_decision_factors:
        console.print("\n[bold]Key Decision Factors:[/bold]")
        for factor in result.tradeoff_summary.key_decision_factors:
            console.print(f"  [green]•[/green] {factor}")

    if result.detected_conflicts:
        console.print(f"\n[bold]Constraint Conflicts ({len(result.detected_conflicts)}):[/bold]")
        for conflict in result.detected_conflicts:
            console.print(f"  [yellow]•[/yellow] {conflict.title}")

    input_assumptions = [a for a in result.assumptions if a.category == AssumptionCategory.INPUT]
    if input_assumptions:
        console.print("\n[bold]Assumptions:[/bold]")
        for assumption in input_assumptions:
            console.print(f"  [yellow]•[/yellow] {assumption.description}")

    if verbose:
        console.print("\n[bold]Trade-offs:[/bold]")
        for tradeoff in result.tradeoff_summary.primary_tradeoffs:
            impacts = ", ".join(f"{a.value}: {label}" for a, label in tradeoff.architecture_impacts.items())
            console.print(f"  {tradeoff.dimension.value} - {tradeoff.description}")
            console.print(f"     [dim]{impacts}[/dim]")

        console.print("\n[bold]Interpretation Guidance:[/bold]")
        for line in result.interpretation_guidance:
            console.print(f"  • {line}")

    if result.validation.warnings:
        console.print("\n[dim]Warnings:[/dim]")
        for warning in result.validation.warnings:
            console.print(f"  [dim]• {warning.message}[/dim]")


def display_conflict(conflict: ConflictWarning):
    tree = Tree(f"[bold yellow]{conflict.title}[/bold yellow] [dim]({conflict.conflict_id})[/dim]")
    tree.add(conflict.description)
    triggers = ", ".join(f"{k}={v}" for k, v in conflict.triggering_constraints.items())
    tree.add(f"Triggered by: {triggers}")
    implications = tree.add("[bold]Implications[/bold]")
    for item in conflict.implications:
        implications.add(item)
    suggestions = tree.add("[bold]Resolution Suggestions[/bold]")
    for item in conflict.resolution_suggestions:
        suggestions.add(item)
    console.print(tree)
    console.print()


def display_impact(impact: ImpactAnalysis, title: str):
    mod = impact.modification
    if mod.constraint_field is not None:
        heading = f"{mod.constraint_field.value}: {mod.previous_value} → {mod.new_value}"
    else:
        heading = mod.reason or mod.operation.value

    table = Table(show_header=True, header_style="bold", title=f"{title}: {heading}")
    table.add_column("Architecture", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Magnitude")
    for arch, change in impact.score_changes.items():
        table.add_row(
            arch.value,
            f"{change.previous_score:.2f}",
            f"{change.new_score:.2f}",
            f"{change.absolute_change:+.2f}",
            change.impact_magnitude.value,
        )
    console.print(table)

    for line in impact.change_summary:
        console.print(f"  [green]•[/green] {line}")
    for line in impact.recommendations:
        console.print(f"  [blue]→[/blue] {line}")
    console.print()


def output_json(result: AnalysisResult, out_path: Optional[str]):
    """Output result as JSON."""
    json_str = result.model_dump_json(indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
