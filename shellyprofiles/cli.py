"""Typer CLI entrypoint."""

from __future__ import annotations

from pathlib import Path

import typer

from shellyprofiles.core.errors import ProfileQueryError, ShellyProfilesError
from shellyprofiles.core.model import FormFactor, Generation, PowerSource, Profile, Series
from shellyprofiles.core.service import ProfileService

app = typer.Typer(help="Query the Shelly device profile catalog")


def _build_service() -> ProfileService:
    service = ProfileService()
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _echo_profile_line(profile: Profile) -> None:
    app_name = f" [{profile.app}]" if profile.app else ""
    typer.echo(f"{profile.model}: {profile.name}{app_name} ({profile.generation}, {profile.series.value})")


def _parse_generation(value: int | None) -> Generation | None:
    if value is None:
        return None
    generation = Generation.from_number(value)
    if generation is Generation.UNKNOWN:
        raise ProfileQueryError(f"Unknown generation {value}. Expected 1-4.")
    return generation


def _parse_minimums(pairs: list[str]) -> dict[str, int | bool]:
    minimums: dict[str, int | bool] = {}
    for pair in pairs:
        field_name, sep, raw = pair.partition("=")
        if not sep or not field_name:
            raise ProfileQueryError(f"Expected FIELD=N, got '{pair}'")
        if raw.lower() in {"true", "false"}:
            minimums[field_name] = raw.lower() == "true"
            continue
        try:
            minimums[field_name] = int(raw)
        except ValueError:
            raise ProfileQueryError(f"Minimum for '{field_name}' must be an integer, got '{raw}'") from None
    return minimums


@app.command("list")
def list_profiles(
    generation: int | None = typer.Option(None, "--generation", help="Generation number (1-4)"),
    series: Series | None = typer.Option(None, "--series", help="Product series"),
    form_factor: FormFactor | None = typer.Option(None, "--form-factor", help="Physical form factor"),
    power_source: PowerSource | None = typer.Option(None, "--power-source", help="Power source"),
) -> None:
    """List catalog profiles, optionally filtered."""
    try:
        service = _build_service()
        profiles = service.list_profiles(
            generation=_parse_generation(generation),
            series=series,
            form_factor=form_factor,
            power_source=power_source,
        )
        if not profiles:
            typer.echo("No profiles matched")
            return
        for profile in profiles:
            _echo_profile_line(profile)
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show_profile(model: str) -> None:
    """Show every catalog detail for MODEL."""
    try:
        service = _build_service()
        profile = service.show(model)
        typer.echo(f"{profile.model}: {profile.name}")
        typer.echo(f"  app: {profile.app or '-'}")
        typer.echo(f"  generation: {profile.generation}")
        typer.echo(f"  series: {profile.series.value}")
        typer.echo(f"  form factor: {profile.form_factor.value}")
        typer.echo(f"  power source: {profile.power_source.value}")
        typer.echo(f"  capabilities: {', '.join(profile.capabilities.enabled()) or '-'}")
        typer.echo(f"  protocols: {', '.join(profile.protocols.enabled()) or '-'}")
        counts = [
            f"{name}={value}"
            for name, value in vars(profile.components).items()
            if value
        ]
        typer.echo(f"  components: {', '.join(counts) or '-'}")
        if profile.sensors:
            typer.echo(f"  sensors: {', '.join(s.value for s in profile.sensors)}")
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("search")
def search_profiles(query: str) -> None:
    """Case-insensitive search over model, name and app."""
    try:
        service = _build_service()
        profiles = service.search(query)
        if not profiles:
            typer.echo(f"No profiles matching '{query}'")
            return
        for profile in profiles:
            _echo_profile_line(profile)
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("detect")
def detect(file: Path | None = typer.Argument(None, help="JSON /shelly response; stdin when omitted")) -> None:
    """Identify a device from its /shelly identification response."""
    try:
        if file is None:
            data = typer.get_text_stream("stdin").read()
        else:
            try:
                data = file.read_bytes()
            except OSError as exc:
                raise ShellyProfilesError(f"Could not read {file}: {exc}") from exc
        service = _build_service()
        result = service.detect_json(data)
        typer.echo(f"Generation: {result.generation}")
        if result.model:
            typer.echo(f"Model: {result.model}")
        if result.app:
            typer.echo(f"App: {result.app}")
        if result.profile is None:
            typer.echo("Profile: <no-match>")
        else:
            typer.echo(f"Profile: {result.profile.model} ({result.profile.name})")
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("match")
def match_profiles(
    capability: list[str] = typer.Option([], "--capability", help="Required capability; repeatable"),
    minimum: list[str] = typer.Option([], "--min", help="Minimum component count as FIELD=N; repeatable"),
) -> None:
    """List profiles having every requested capability and component minimum."""
    try:
        service = _build_service()
        profiles = service.match(capability, _parse_minimums(minimum))
        if not profiles:
            typer.echo("No profiles matched")
            return
        for profile in profiles:
            _echo_profile_line(profile)
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("similar")
def similar_profiles(model: str) -> None:
    """List profiles sharing generation, series and form factor with MODEL."""
    try:
        service = _build_service()
        profiles = service.similar(model)
        if not profiles:
            typer.echo(f"No profiles similar to '{model}'")
            return
        for profile in profiles:
            _echo_profile_line(profile)
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("infer")
def infer_capabilities(app_name: str = typer.Argument(..., metavar="APP")) -> None:
    """Guess capabilities from a firmware app name with no catalog entry.

    The guess is best-effort and incomplete.
    """
    try:
        service = _build_service()
        capabilities = service.infer_capabilities(app_name)
        enabled = capabilities.enabled()
        typer.echo(f"{app_name}: {', '.join(enabled) if enabled else '<none inferred>'}")
    except ShellyProfilesError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
