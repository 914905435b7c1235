
import pytest
from conftest import FakeRunner, RecordingConfirmation, console_text, failing

from sorodeploy.config.models import AppConfig
from sorodeploy.pipeline.context import PipelineContext
from sorodeploy.pipeline.results import HardFailure, Success
from sorodeploy.pipeline.stages import ResourceProvisioner
from sorodeploy.reporting import ConsoleReporter
from sorodeploy.services.soroban import SorobanCLI
from sorodeploy.workspace import Workspace

PASSPHRASE = "Test SDF Network ; September 2015"
RPC = "https://soroban-testnet.stellar.org:443"


def make_provisioner(
    runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> ResourceProvisioner:
    return ResourceProvisioner(
        cli=SorobanCLI(runner=runner),
        network=config.network,
        identity=config.identity,
        reporter=reporter,
        confirm=confirm,
    )


def test_ensure_network_adds_missing_network_once(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    provisioner = make_provisioner(fake_runner, config, reporter, confirm)

    first = provisioner.ensure_network("testnet", RPC, PASSPHRASE)
    second = provisioner.ensure_network("testnet", RPC, PASSPHRASE)

    assert isinstance(first, Success) and first.detail == "created"
    assert isinstance(second, Success) and second.detail == "existing"
    assert fake_runner.networks == ["testnet"]
    assert len(fake_runner.invoked("soroban", "network", "add")) == 1


def test_ensure_network_never_updates_existing_entry(
    config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    runner = FakeRunner(networks=["testnet"])
    result = make_provisioner(runner, config, reporter, confirm).ensure_network("testnet", "http://other", "Other")
    assert isinstance(result, Success)
    assert runner.invoked("soroban", "network", "add") == []


def test_ensure_network_list_failure_is_hard(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    fake_runner.overrides[("soroban", "network", "ls")] = failing(stderr="config dir unreadable")
    result = make_provisioner(fake_runner, config, reporter, confirm).ensure_network("testnet", RPC, PASSPHRASE)
    assert isinstance(result, HardFailure)
    assert result.output == "config dir unreadable"


def test_ensure_network_add_failure_is_hard(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    fake_runner.overrides[("soroban", "network", "add")] = failing()
    result = make_provisioner(fake_runner, config, reporter, confirm).ensure_network("testnet", RPC, PASSPHRASE)
    assert isinstance(result, HardFailure)
    assert "testnet" in result.error


def test_existing_identity_returns_address_without_prompt(
    config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    runner = FakeRunner(keys={"deployer": "GABC123"})
    result = make_provisioner(runner, config, reporter, confirm).ensure_identity("deployer", "testnet")

    assert isinstance(result, Success)
    assert result.payload == "GABC123"
    assert confirm.calls == []
    assert runner.invoked("soroban", "keys", "generate") == []
    assert "friendbot" not in console_text(reporter)


def test_new_identity_is_generated_and_waits_for_funding(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    result = make_provisioner(fake_runner, config, reporter, confirm).ensure_identity("deployer", "testnet")

    assert isinstance(result, Success)
    assert result.payload == "GDEPLOYERADDRESS"
    assert fake_runner.invoked("soroban", "keys", "generate") == [
        ["soroban", "keys", "generate", "deployer", "--network", "testnet"]
    ]
    assert confirm.calls == [("GDEPLOYERADDRESS", "https://friendbot.stellar.org?addr=GDEPLOYERADDRESS")]
    assert "https://friendbot.stellar.org?addr=GDEPLOYERADDRESS" in console_text(reporter)


def test_ensure_identity_is_idempotent(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    provisioner = make_provisioner(fake_runner, config, reporter, confirm)
    first = provisioner.ensure_identity("deployer", "testnet")
    second = provisioner.ensure_identity("deployer", "testnet")

    assert first.payload == second.payload
    assert list(fake_runner.keys) == ["deployer"]
    assert len(confirm.calls) == 1


def test_interrupted_funding_wait_leaves_identity_for_next_run(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter
) -> None:
    def interrupt(address: str, funding_url: str) -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        make_provisioner(fake_runner, config, reporter, interrupt).ensure_identity("deployer", "testnet")

    rerun_confirm = RecordingConfirmation()
    result = make_provisioner(fake_runner, config, reporter, rerun_confirm).ensure_identity("deployer", "testnet")
    assert isinstance(result, Success)
    assert rerun_confirm.calls == []


def test_generate_failure_skips_funding_prompt(
    fake_runner: FakeRunner, config: AppConfig, reporter: ConsoleReporter, confirm: RecordingConfirmation
) -> None:
    fake_runner.overrides[("soroban", "keys", "generate")] = failing(stderr="keystore locked")
    result = make_provisioner(fake_runner, config, reporter, confirm).ensure_identity("deployer", "testnet")
    assert isinstance(result, HardFailure)
    assert confirm.calls == []


def test_provisioner_run_sets_up_network_then_identity(
    fake_runner: FakeRunner,
    config: AppConfig,
    workspace: Workspace,
    reporter: ConsoleReporter,
    confirm: RecordingConfirmation,
) -> None:
    ctx = PipelineContext(config=config, workspace=workspace, target_network_name="testnet")
    result = make_provisioner(fake_runner, config, reporter, confirm).run(ctx)

    assert isinstance(result, Success)
    assert result.payload == "GDEPLOYERADDRESS"
    assert ctx.signing_identity_address is None
    assert ctx.diagnostics["stages"]["Provisioning"]["network"]["status"] == "created"


def test_provisioner_run_stops_when_network_fails(
    fake_runner: FakeRunner,
    config: AppConfig,
    workspace: Workspace,
    reporter: ConsoleReporter,
    confirm: RecordingConfirmation,
) -> None:
    fake_runner.overrides[("soroban", "network", "ls")] = failing()
    ctx = PipelineContext(config=config, workspace=workspace, target_network_name="testnet")
    result = make_provisioner(fake_runner, config, reporter, confirm).run(ctx)
    assert isinstance(result, HardFailure)
    assert fake_runner.invoked("soroban", "keys") == []
