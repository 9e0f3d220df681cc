import logging
from contextlib import ExitStack
from datetime import datetime
from typing import Any, Dict, List

from agents.base_agent import BaseAgent
from config.settings import settings
from core.image_store import FileArtifactSink, FileBaselineStore
from core.screenshot import PlaywrightScreenshotSource, ScreenshotSource, browser_page
from core.visual_comparator import VisualComparator
from models.comparison import ComparisonOutcome, ComparisonResult
from models.test_case import AgentResponse
from utils.file_utils import save_json, timestamped_filename

logger = logging.getLogger(__name__)

class VisualRegressionAgent(BaseAgent):
    """Agent that captures pages and compares them with stored baselines"""

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__("VisualRegressionAgent", config)

        self.threshold = self.get_config('threshold', settings.VISUAL_DIFF_THRESHOLD)
        self.create_missing_baselines = self.get_config('create_missing_baselines', False)

        dirs = settings.get_visual_dirs(self.get_config('visual_dir'))
        self.baseline_store = FileBaselineStore(dirs['baseline'])
        self.comparator = VisualComparator(
            threshold=self.threshold,
            artifact_sink=FileArtifactSink(dirs['actual'], dirs['diff'])
        )
        self.summaries_dir = dirs['summaries']

        self.logger.info("VisualRegressionAgent initialized")
        self.logger.info(f"Baseline directory: {dirs['baseline']}")

    def process(self, input_data: Dict[str, Any]) -> AgentResponse:
        """
        Run a visual regression pass

        Args:
            input_data: Dict containing:
                - targets: list of {'name': str, and either 'source': ScreenshotSource
                  or 'url': str with optional 'selector' and 'full_page'}
                - threshold: Optional per-run threshold override
                - update_baselines: Store fresh baselines instead of comparing
        """
        missing = self.missing_keys(input_data, ['targets'])
        if missing:
            return self.create_error_response(f"Missing required input: {', '.join(missing)}")

        try:
            threshold = input_data.get('threshold', self.threshold)
            update_baselines = input_data.get('update_baselines', False)
            started = datetime.now()

            entries = [self.run_target(target, threshold, update_baselines) for target in input_data['targets']]

            summary = self.summarize(entries, started, threshold)
            summary_path = save_json(summary, self.summaries_dir / timestamped_filename("visual_summary"))

            self.log_operation("visual_run_completed", {
                'targets': summary['total'],
                'passed': summary['passed'],
                'failed': summary['failed'],
                'missing_baselines': summary['missing_baselines'],
                'errors': summary['errors']
            })

            return self.create_success_response(
                f"Visual run completed: {summary['passed']}/{summary['compared']} comparisons passed",
                {'summary': summary, 'summary_path': str(summary_path), 'all_passed': summary['all_passed']}
            )

        except ValueError as e:
            return self.create_error_response("Invalid visual run configuration", str(e))
        except Exception as e:
            error_msg = f"Visual run failed: {str(e)}"
            self.logger.error(error_msg)
            return self.create_error_response(error_msg, str(e))

    def run_target(self, target: Dict[str, Any], threshold: float, update_baselines: bool) -> Dict[str, Any]:
        name = target.get('name')
        if not name:
            raise ValueError("Every target needs a name")

        with ExitStack() as stack:
            source = target.get('source') or self._page_source(stack, target)

            if update_baselines or (self.create_missing_baselines and not self.baseline_store.exists(name)):
                baseline_path = self.comparator.save_baseline(source, self.baseline_store, name)
                return {
                    'name': name,
                    'status': 'baseline_saved' if baseline_path else 'error',
                    'baseline_path': baseline_path
                }

            result = self.comparator.capture_and_compare(source, self.baseline_store, name, threshold)
            return self._entry(name, result)

    def _page_source(self, stack: ExitStack, target: Dict[str, Any]) -> ScreenshotSource:
        page = stack.enter_context(browser_page(target.get('url'), self.get_config('browser')))
        return PlaywrightScreenshotSource(page, target.get('selector'), target.get('full_page', False))

    def _entry(self, name: str, result: ComparisonResult) -> Dict[str, Any]:
        if result.outcome == ComparisonOutcome.NO_BASELINE:
            status = 'no_baseline'
        elif result.outcome == ComparisonOutcome.IO_ERROR:
            status = 'error'
        else:
            status = 'passed' if result.passed else 'failed'

        entry = result.model_dump(mode='json')
        entry.update({'name': name, 'status': status})
        return entry

    def summarize(self, entries: List[Dict[str, Any]], started: datetime, threshold: float) -> Dict[str, Any]:
        counts = {status: 0 for status in ('passed', 'failed', 'no_baseline', 'error', 'baseline_saved')}
        for entry in entries:
            counts[entry['status']] += 1

        compared = counts['passed'] + counts['failed']
        return {
            'started_at': started.isoformat(),
            'duration': (datetime.now() - started).total_seconds(),
            'threshold': threshold,
            'total': len(entries),
            'compared': compared,
            'passed': counts['passed'],
            'failed': counts['failed'],
            'missing_baselines': counts['no_baseline'],
            'errors': counts['error'],
            'baselines_saved': counts['baseline_saved'],
            'all_passed': counts['failed'] == 0 and counts['no_baseline'] == 0 and counts['error'] == 0,
            'results': entries
        }

