from models.program import Program
from models.schedule import ScheduleTemplate
from models.slot import Slot
from utils.seed import seed_catalog


def test_seed_catalog_is_idempotent(session):
    assert seed_catalog() == 3
    assert seed_catalog() == 0
    assert Program.query.count() == 3
    assert ScheduleTemplate.query.count() == 6


def test_seed_and_generate_commands(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-demo"])
    assert "3 programs added" in result.output

    result = runner.invoke(args=["generate-slots"])
    assert result.exit_code == 0
    assert "3 programs processed" in result.output
    assert session.query(Slot).count() > 0


def test_generate_single_program_command(app, session, make_program, weekly_template):
    program = make_program(schedules=[weekly_template(day=d) for d in range(7)])
    runner = app.test_cli_runner()

    result = runner.invoke(args=["generate-slots", "--program-id", str(program.id)])

    assert f"Program {program.id}: 44 slots created" in result.output
