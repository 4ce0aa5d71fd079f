"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from prosecheck.infrastructure.di.container import ProsecheckContainer
from prosecheck.infrastructure.reporters import FormatterFactory
from prosecheck.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = ProsecheckContainer.get_instance()

    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        filesystem=container.get_filesystem_gateway(),
        registry=container.get_registry(),
        config_source=container.get_config_file_loader(),
        rule_catalog=container.get_rule_catalog(),
        formatter_factory=FormatterFactory.create,
    )

    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
