import json
from pathlib import Path

import pytest

from agents.test_generator_agent import TestGeneratorAgent
from agents.visual_regression_agent import VisualRegressionAgent
from core.test_case_generator import BUTTON_SELECTOR

from helpers import FailingScreenshotSource, FakeElement, FakePage, StaticScreenshotSource, solid_image

@pytest.fixture
def visual_agent(tmp_path) -> VisualRegressionAgent:
    return VisualRegressionAgent({'visual_dir': tmp_path / "visual"})

def run(agent, update_baselines=False, **sources):
    targets = [{'name': name, 'source': source} for name, source in sources.items()]
    return agent.process({'targets': targets, 'update_baselines': update_baselines})

def test_baselines_then_passing_comparison(visual_agent, white_2x2):
    saved = run(visual_agent, update_baselines=True, Login=StaticScreenshotSource(white_2x2))
    assert saved.success
    assert saved.data['summary']['baselines_saved'] == 1

    compared = run(visual_agent, Login=StaticScreenshotSource(white_2x2))

    summary = compared.data['summary']
    assert compared.data['all_passed']
    assert summary['compared'] == 1
    assert summary['passed'] == 1
    assert summary['results'][0]['status'] == "passed"
    assert summary['results'][0]['diff_percentage'] == 0.0

def test_summary_report_is_written(visual_agent, white_2x2):
    response = run(visual_agent, update_baselines=True, Login=StaticScreenshotSource(white_2x2))

    summary_path = Path(response.data['summary_path'])
    assert summary_path.name.startswith("visual_summary_")
    assert json.loads(summary_path.read_text(encoding="utf-8"))['total'] == 1

def test_visual_change_fails_the_run(visual_agent, white_2x2, one_black_pixel_2x2):
    run(visual_agent, update_baselines=True, Login=StaticScreenshotSource(white_2x2))

    response = run(visual_agent, Login=StaticScreenshotSource(one_black_pixel_2x2))

    entry = response.data['summary']['results'][0]
    assert response.success
    assert not response.data['all_passed']
    assert entry['status'] == "failed"
    assert entry['diff_percentage'] == 0.25
    assert Path(entry['diff_path']).exists()

def test_missing_baseline_and_capture_errors_are_reported(visual_agent, white_2x2):
    run(visual_agent, update_baselines=True, Dashboard=StaticScreenshotSource(white_2x2))

    response = run(visual_agent, Login=StaticScreenshotSource(white_2x2), Dashboard=FailingScreenshotSource())

    summary = response.data['summary']
    assert [entry['status'] for entry in summary['results']] == ["no_baseline", "error"]
    assert summary['missing_baselines'] == 1
    assert summary['errors'] == 1
    assert not summary['all_passed']

def test_missing_baselines_can_be_created(tmp_path, white_2x2):
    agent = VisualRegressionAgent({'visual_dir': tmp_path, 'create_missing_baselines': True})

    response = run(agent, Login=StaticScreenshotSource(white_2x2))

    assert response.data['summary']['results'][0]['status'] == "baseline_saved"
    assert (tmp_path / "baseline" / "Login.png").exists()

def test_per_run_threshold(visual_agent, white_2x2, one_black_pixel_2x2):
    run(visual_agent, update_baselines=True, Login=StaticScreenshotSource(white_2x2))

    response = visual_agent.process({
        'targets': [{'name': 'Login', 'source': StaticScreenshotSource(one_black_pixel_2x2)}],
        'threshold': 0.3
    })

    assert response.data['all_passed']
    assert response.data['summary']['threshold'] == 0.3

def test_invalid_visual_input(visual_agent, white_2x2):
    assert not visual_agent.process({}).success
    assert not visual_agent.process("Login").success

    unnamed = visual_agent.process({'targets': [{'source': StaticScreenshotSource(white_2x2)}]})
    assert unnamed.message == "Invalid visual run configuration"

    bad_threshold = visual_agent.process({
        'targets': [{'name': 'Login', 'source': StaticScreenshotSource(white_2x2)}], 'threshold': 2.0
    })
    assert not bad_threshold.success

def test_agent_status_tracks_runs(visual_agent):
    visual_agent.process({})

    status = visual_agent.get_status()
    assert status['name'] == "VisualRegressionAgent"
    assert status['stats']['runs'] == 1
    assert status['stats']['failures'] == 1

@pytest.fixture
def employee_page() -> FakePage:
    return FakePage(children={
        BUTTON_SELECTOR: [FakeElement("button", "Save", attrs={'type': 'submit'})],
        "a": [FakeElement("a", "Employee List", attrs={'href': '/pim/viewEmployeeList'})],
    })

def test_generator_agent_writes_module_and_listing(tmp_path, employee_page):
    agent = TestGeneratorAgent({'output_dir': tmp_path})

    response = agent.process({'page_name': "AddEmployee", 'page': employee_page})

    assert response.success
    assert response.data['breakdown'] == {'positive': 2}
    assert Path(response.data['module_path']).name.startswith("test_addemployee_generated_")
    listing = json.loads(Path(response.data['listing_path']).read_text(encoding="utf-8"))
    assert listing['page_name'] == "AddEmployee"
    assert [case['function_name'] for case in listing['test_cases']] == [
        "test_save_button_submits_form", "test_employee_list_link_navigation"
    ]

def test_generator_agent_without_elements(tmp_path):
    response = TestGeneratorAgent({'output_dir': tmp_path}).process({'page_name': "Blank", 'page': FakePage()})

    assert not response.success
    assert response.message == "No test cases generated for page: Blank"

def test_generator_agent_requires_page_name():
    response = TestGeneratorAgent().process({'page': FakePage()})

    assert not response.success
    assert response.message == "Missing required input: page_name"

def test_visual_target_sizes_are_normalized(visual_agent):
    run(visual_agent, update_baselines=True, Login=StaticScreenshotSource(solid_image(4, 4)))

    response = run(visual_agent, Login=StaticScreenshotSource(solid_image(2, 2)))

    entry = response.data['summary']['results'][0]
    assert entry['status'] == "passed"
    assert entry['metadata']['resized'] is True
