import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from agents.test_generator_agent import TestGeneratorAgent
from agents.visual_regression_agent import VisualRegressionAgent
from config.settings import settings
from core.content_analyzer import ContentAnalyzer
from core.field_validator import FieldValidator
from core.screenshot import browser_page
from core.text_similarity import levenshtein_similarity, relevance
from core.visual_comparator import VisualComparator

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

MODES = ['baseline', 'compare', 'compare-files', 'generate-tests', 'analyze-page',
         'similarity', 'train', 'validate']

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Visual regression and content checks for the HR web application')
    parser.add_argument('--mode', choices=MODES, required=True, help='What to run')
    parser.add_argument('--name', type=str, action='append',
                        help='Page or element name (repeatable for baseline/compare)')
    parser.add_argument('--url', type=str, help=f'Page URL (default: {settings.BASE_URL})')
    parser.add_argument('--selector', type=str, help='Capture only this element')
    parser.add_argument('--full-page', action='store_true', help='Capture the full scrollable page')
    parser.add_argument('--threshold', type=float, help='Accepted share of differing pixels (0-1)')
    parser.add_argument('--baseline', type=str, help='Baseline image path (compare-files)')
    parser.add_argument('--actual', type=str, help='Actual image path (compare-files)')
    parser.add_argument('--topic', type=str, help='Topic for page analysis')
    parser.add_argument('--text', type=str, nargs=2, metavar=('A', 'B'), help='Texts for similarity')
    parser.add_argument('--field-type', type=str, help='Field type for train/validate')
    parser.add_argument('--value', type=str, help='Value to validate')
    parser.add_argument('--examples', type=str, nargs='+', help='Training examples')
    parser.add_argument('--output-dir', type=str, help='Output directory for generated tests')
    return parser

def _visual_run(args: argparse.Namespace, update_baselines: bool) -> Dict[str, Any]:
    if not args.name:
        return {'success': False, 'message': '--name is required', 'error': 'Missing required argument'}

    targets = [{'name': name, 'url': args.url, 'selector': args.selector, 'full_page': args.full_page}
               for name in args.name]
    run_input = {'targets': targets, 'update_baselines': update_baselines}
    if args.threshold is not None:
        run_input['threshold'] = args.threshold

    return VisualRegressionAgent().process(run_input).model_dump()

def _compare_files(args: argparse.Namespace) -> Dict[str, Any]:
    if not args.baseline or not args.actual:
        return {'success': False, 'message': '--baseline and --actual are required', 'error': 'Missing required argument'}

    try:
        result = VisualComparator(settings.VISUAL_DIFF_THRESHOLD).compare_files(args.baseline, args.actual, args.threshold)
    except ValueError as e:
        return {'success': False, 'message': 'Invalid comparison configuration', 'error': str(e)}

    return {
        'success': result.passed,
        'message': str(result),
        'data': result.model_dump(mode='json'),
        'error': result.error
    }

def _analyze_page(args: argparse.Namespace) -> Dict[str, Any]:
    if not args.topic:
        return {'success': False, 'message': '--topic is required', 'error': 'Missing required argument'}

    with browser_page(args.url) as page:
        analysis = ContentAnalyzer().analyze_page(page, args.topic)
    return {'success': True, 'message': analysis.explanation, 'data': analysis.model_dump(mode='json')}

def _similarity(args: argparse.Namespace) -> Dict[str, Any]:
    if not args.text:
        return {'success': False, 'message': '--text A B is required', 'error': 'Missing required argument'}

    text_a, text_b = args.text
    return {
        'success': True,
        'message': 'Similarity computed',
        'data': {
            'levenshtein_similarity': levenshtein_similarity(text_a, text_b),
            'relevance': relevance(text_a, text_b)
        }
    }

def _train(args: argparse.Namespace) -> Dict[str, Any]:
    if not args.field_type or not args.examples:
        return {'success': False, 'message': '--field-type and --examples are required', 'error': 'Missing required argument'}

    validator = FieldValidator.load(settings.ML_MODELS_DIR).train(args.field_type, args.examples)
    validator.save(settings.ML_MODELS_DIR)
    return {
        'success': True,
        'message': f"Trained {args.field_type} with {len(validator.examples(args.field_type))} examples",
        'data': {'pattern': validator.pattern(args.field_type)}
    }

def _validate(args: argparse.Namespace) -> Dict[str, Any]:
    if not args.field_type or args.value is None:
        return {'success': False, 'message': '--field-type and --value are required', 'error': 'Missing required argument'}

    result = FieldValidator.load(settings.ML_MODELS_DIR).validate_field(args.field_type, args.value)
    return {'success': result.valid, 'message': result.message, 'data': result.model_dump()}

def main(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    args = build_parser().parse_args(argv)

    if args.mode == 'baseline':
        result = _visual_run(args, update_baselines=True)
    elif args.mode == 'compare':
        result = _visual_run(args, update_baselines=False)
    elif args.mode == 'compare-files':
        result = _compare_files(args)
    elif args.mode == 'generate-tests':
        if not args.name:
            result = {'success': False, 'message': '--name is required', 'error': 'Missing required argument'}
        else:
            agent = TestGeneratorAgent({'output_dir': args.output_dir} if args.output_dir else None)
            result = agent.process({'page_name': args.name[0], 'url': args.url}).model_dump()
    elif args.mode == 'analyze-page':
        result = _analyze_page(args)
    elif args.mode == 'similarity':
        result = _similarity(args)
    elif args.mode == 'train':
        result = _train(args)
    else:
        result = _validate(args)

    if result.get('success'):
        logger.info(f"✅ {result.get('message')}")
    else:
        logger.error(f"❌ {result.get('message', 'Unknown error')}")
        if result.get('error') and result.get('error') != result.get('message'):
            logger.error(f"   Error details: {result['error']}")

    data = result.get('data') or {}
    summary = data.get('summary')
    if summary:
        print("\n" + "=" * 60)
        print("VISUAL REGRESSION RESULTS")
        print("=" * 60)
        for entry in summary['results']:
            diff = entry.get('diff_percentage')
            diff_text = f"{diff * 100:.2f}%" if diff is not None else "-"
            print(f"   {entry['name']}: {entry['status']} ({diff_text})")
        print(f"📁 Summary: {data.get('summary_path')}")
    elif data.get('module_path'):
        print(f"📄 Generated tests: {data['module_path']}")
        for test_type, count in data.get('breakdown', {}).items():
            print(f"   {test_type}: {count}")

    return result

if __name__ == "__main__":
    result = main()
    sys.exit(0 if result.get('success') else 1)
