"""Generate and run commands for producing random interactions."""

import time
from pathlib import Path

import typer
from pydantic import ValidationError

from ...config import get_config
from ...core.models import (
    CUSTOM_PROFILE,
    ProfileError,
    ProfileSelection,
    RunResult,
    RunSpec,
    SamplingConfig,
    SymbolCategory,
    preset_names,
)
from ...core.models.profile import CUSTOM_DEFAULT_WEIGHTS
from ..app import app, console, get_json_mode, setup_logging
from ..utils import Output, ExitCode, format_elapsed, format_run_result_for_json


def _custom_weights(flags: dict[SymbolCategory, float | None]) -> dict[str, float]:
    """Explicit weights for --probas custom; unset flags keep their default."""
    weights = {c.value: CUSTOM_DEFAULT_WEIGHTS.get(c, 0.0) for c in SymbolCategory}
    for category, value in flags.items():
        if value is not None:
            weights[category.value] = value
    return weights


@app.command("generate")
def generate_command(
    context: Path = typer.Argument(
        ..., help="Input file parsed by the plugin into a generation context"
    ),
    plugin: str = typer.Option(
        None,
        "--plugin",
        "-p",
        help="Generation plugin as 'package.module:attribute' (default from config)",
    ),
    num_ints: int = typer.Option(
        None, "--num-ints", "-n", help="Number of distinct interactions to generate"
    ),
    max_depth: int = typer.Option(None, "--max-depth", help="Maximum interaction depth"),
    min_symbols: int = typer.Option(
        None, "--min-symbols", help="Minimum number of symbols per interaction"
    ),
    num_tries: int = typer.Option(
        None,
        "--num-tries",
        help="Retry budget shared by the whole run (default: num_ints * multiplier * min_symbols)",
    ),
    seed: int = typer.Option(None, "--seed", help="Random seed for reproducibility"),
    folder: Path = typer.Option(None, "--folder", "-o", help="Output folder"),
    probas: str = typer.Option(
        None,
        "--probas",
        help=f"Symbol selection probabilities: {', '.join(preset_names())}",
    ),
    pempty: float = typer.Option(None, "--pempty", help="Custom weight: empty"),
    paction: float = typer.Option(None, "--paction", help="Custom weight: action"),
    pstrict: float = typer.Option(None, "--pstrict", help="Custom weight: strict"),
    pseq: float = typer.Option(None, "--pseq", help="Custom weight: sequence"),
    pcoreg: float = typer.Option(None, "--pcoreg", help="Custom weight: co-region"),
    ppar: float = typer.Option(None, "--ppar", help="Custom weight: parallel"),
    ploop_strict: float = typer.Option(
        None, "--ploop-strict", help="Custom weight: loop-strict"
    ),
    ploop_weak: float = typer.Option(None, "--ploop-weak", help="Custom weight: loop-weak"),
    ploop_interleaved: float = typer.Option(
        None, "--ploop-interleaved", help="Custom weight: loop-interleaved"
    ),
    palt: float = typer.Option(None, "--palt", help="Custom weight: alternative"),
    pbasic: float = typer.Option(None, "--pbasic", help="Custom weight: leaf"),
    ptransmission: float = typer.Option(
        None, "--ptransmission", help="Custom weight: transmission"
    ),
    pbroadcast: float = typer.Option(None, "--pbroadcast", help="Custom weight: broadcast"),
    save_run: Path = typer.Option(
        None, "--save-run", help="Also save the resolved run spec to this YAML file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each written file"),
    debug: bool = typer.Option(False, "--debug", help="Log every attempt"),
):
    """
    Generate distinct random interactions into an output folder.

    Interactions are written as i0.<ext>, i1.<ext>, ... in generation order.
    Failed and duplicate attempts draw on a single retry budget; when it runs
    out the command stops and reports how many interactions it produced.

    EXIT CODES:
        0 = Success (target reached, or retry budget exhausted)
        1 = Validation error
        3 = File not found
        4 = Sampling error

    Examples:
        interactgen generate sig.hsf -p mylang.plugin:PLUGIN -n 50 --seed 42
        interactgen generate sig.hsf -p mylang.plugin:PLUGIN --probas conservative
        interactgen generate sig.hsf -p mylang.plugin:PLUGIN --probas custom --pempty 0 --paction 1
    """
    setup_logging(verbose=verbose, debug=debug)
    out = Output(console=console, json_mode=get_json_mode())
    defaults = get_config().defaults

    plugin = plugin or defaults.plugin
    if not plugin:
        out.error(
            "No generation plugin given",
            suggestion="Pass --plugin package.module:attribute or run "
            "'interactgen config set defaults.plugin <ref>'",
        )
        raise typer.Exit(out.finish())

    custom_flags = {
        SymbolCategory.EMPTY: pempty,
        SymbolCategory.ACTION: paction,
        SymbolCategory.STRICT: pstrict,
        SymbolCategory.SEQUENCE: pseq,
        SymbolCategory.COREGION: pcoreg,
        SymbolCategory.PARALLEL: ppar,
        SymbolCategory.LOOP_STRICT: ploop_strict,
        SymbolCategory.LOOP_WEAK: ploop_weak,
        SymbolCategory.LOOP_INTERLEAVED: ploop_interleaved,
        SymbolCategory.ALTERNATIVE: palt,
        SymbolCategory.LEAF: pbasic,
        SymbolCategory.TRANSMISSION: ptransmission,
        SymbolCategory.BROADCAST: pbroadcast,
    }
    probas = probas or defaults.probas
    weights = None
    if probas == CUSTOM_PROFILE:
        weights = _custom_weights(custom_flags)
    elif any(v is not None for v in custom_flags.values()):
        out.warning(
            f"Custom weights ignored with --probas {probas}",
            suggestion="Use --probas custom to apply them",
        )

    try:
        spec = RunSpec(
            plugin=plugin,
            context=context,
            profile=ProfileSelection(preset=probas, weights=weights),
            sampling=SamplingConfig.with_defaults(
                num_ints if num_ints is not None else defaults.num_ints,
                max_depth=max_depth if max_depth is not None else defaults.max_depth,
                min_symbols=(
                    min_symbols if min_symbols is not None else defaults.min_symbols
                ),
                retry_budget=num_tries,
                seed=seed if seed is not None else defaults.seed,
                output_dir=folder if folder is not None else defaults.output_folder,
                retry_multiplier=defaults.retry_multiplier,
            ),
        )
    except ValidationError as e:
        out.error(f"Invalid run configuration: {e}")
        raise typer.Exit(out.finish())

    raise typer.Exit(execute_run(spec, out, save_run=save_run))


@app.command("run")
def run_command(
    run_file: Path = typer.Argument(..., help="Run spec YAML saved with --save-run"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each written file"),
    debug: bool = typer.Option(False, "--debug", help="Log every attempt"),
):
    """
    Replay a generation run from a saved run spec.

    The same run spec, plugin version and seed produce the same files.

    Example:
        interactgen run gen_ints.run.yaml
    """
    setup_logging(verbose=verbose, debug=debug)
    out = Output(console=console, json_mode=get_json_mode())

    if not run_file.exists():
        out.error(f"Run file not found: {run_file}", exit_code=ExitCode.FILE_NOT_FOUND)
        raise typer.Exit(out.finish())

    try:
        spec = RunSpec.from_yaml(run_file)
    except ValidationError as e:
        out.error(f"Invalid run spec {run_file}: {e}")
        raise typer.Exit(out.finish())
    except Exception as e:
        out.error(f"Failed to load run spec: {e}")
        raise typer.Exit(out.finish())

    raise typer.Exit(execute_run(spec, out))


def execute_run(spec: RunSpec, out: Output, save_run: Path | None = None) -> int:
    """Validate a run spec, run the sampler, report, and return the exit code.

    The spec is written to ``save_run`` only once profile, plugin and context
    have all loaded.
    """
    from ...sampler import (
        ContextError,
        PluginError,
        SamplingError,
        load_context,
        load_plugin,
        plugin_persister,
        run_sampling,
    )

    start_time = time.time()
    sampling = spec.sampling

    # Configuration errors are reported before any attempt is made
    try:
        profile = spec.profile.build()
    except ProfileError as e:
        out.error(f"Invalid probabilities: {e}")
        return out.finish()

    try:
        plugin = load_plugin(spec.plugin)
    except PluginError as e:
        out.error(str(e))
        return out.finish()

    try:
        context = load_context(plugin, spec.context)
    except FileNotFoundError as e:
        out.error(str(e), exit_code=ExitCode.FILE_NOT_FOUND)
        return out.finish()
    except ContextError as e:
        out.error(str(e))
        return out.finish()

    if save_run is not None:
        spec.to_yaml(save_run)
        out.success(f"Saved run spec to [bold]{save_run}[/bold]", run_file=str(save_run))

    out.success(
        f"Loaded context [bold]{spec.context}[/bold] with plugin {spec.plugin}",
        plugin=spec.plugin,
        context=str(spec.context),
        probas=profile.name,
    )

    result: RunResult | None = None
    sampling_error: SamplingError | None = None
    persister = plugin_persister(plugin)

    def _run(on_progress=None) -> RunResult:
        return run_sampling(
            sampling,
            profile,
            plugin.generate,
            persister,
            context=context,
            on_progress=on_progress,
        )

    show_progress = sampling.target_count >= 100 and not out.json_mode

    if show_progress:
        from rich.progress import (
            Progress,
            SpinnerColumn,
            TextColumn,
            BarColumn,
            TaskProgressColumn,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[cyan]Generating interactions...[/cyan]"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Generating", total=sampling.target_count)

            def on_progress(current: int, total: int):
                progress.update(task, completed=current)

            try:
                result = _run(on_progress)
            except SamplingError as e:
                sampling_error = e
    elif not out.json_mode:
        with console.status("[cyan]Generating interactions...[/cyan]"):
            try:
                result = _run()
            except SamplingError as e:
                sampling_error = e
    else:
        try:
            result = _run()
        except SamplingError as e:
            sampling_error = e

    if sampling_error:
        out.error(
            f"Generation failed: {sampling_error}",
            exit_code=ExitCode.SAMPLING_ERROR,
            suggestion="Check that the output folder is writable",
        )
        return out.finish()

    elapsed = time.time() - start_time
    out.set_data("run", format_run_result_for_json(result))
    out.set_data("total_time_seconds", elapsed)

    out.blank()
    for line in result.status_lines[:-1]:
        out.text(f"[dim]{line}[/dim]")
    out.divider()
    if result.succeeded:
        out.success(
            f"Generated {result.produced_count} interactions in "
            f"[bold]{sampling.output_dir}[/bold] "
            f"({result.attempts} attempts, {format_elapsed(elapsed)}, seed={result.seed})"
        )
    else:
        out.warning(
            f"Retry budget exhausted: generated {result.produced_count} out of "
            f"{result.target_count} interactions in {sampling.output_dir}",
            suggestion="Raise --num-tries or lower --min-symbols",
        )
        out.set_data("status", "partial")
    out.divider()

    return out.finish()
