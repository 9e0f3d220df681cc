import streamlit as st
import sys
from pathlib import Path
import pandas as pd
from typing import Dict, Any, List
current_dir = Path(__file__).parent
parent_dir = current_dir.parent
sys.path.insert(0, str(parent_dir))

from config.settings import settings
from core.text_similarity import (
    levenshtein_distance, levenshtein_similarity, relevance, remove_stop_words, tokenize
)
from utils.file_utils import list_json_files, load_json

# Page config
st.set_page_config(
    page_title="HR Visual QA",
    page_icon="🖼️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        padding: 2rem;
        border-radius: 15px;
        margin-bottom: 2rem;
        text-align: center;
        color: white;
    }

    .main-header h1 {
        font-size: 2.5rem;
        margin: 0;
    }
</style>
""", unsafe_allow_html=True)

STATUS_ICONS = {
    'passed': '✅',
    'failed': '❌',
    'no_baseline': '🆕',
    'error': '⚠️',
    'baseline_saved': '💾'
}

@st.cache_data(ttl=30)
def load_summaries(summaries_dir: str) -> List[Dict[str, Any]]:
    summaries = []
    for path in list_json_files(summaries_dir, "visual_summary_*.json"):
        try:
            summary = load_json(path)
        except ValueError as e:
            st.warning(f"Skipping unreadable summary {path.name}: {e}")
            continue
        summary['file'] = path.name
        summaries.append(summary)
    return summaries

def results_frame(summary: Dict[str, Any]) -> pd.DataFrame:
    rows = []
    for entry in summary.get('results', []):
        diff = entry.get('diff_percentage')
        rows.append({
            'Status': f"{STATUS_ICONS.get(entry['status'], '')} {entry['status']}",
            'Name': entry['name'],
            'Diff %': round(diff * 100, 2) if diff is not None else None,
            'Differing pixels': (entry.get('metadata') or {}).get('differing_pixels'),
            'Resized': (entry.get('metadata') or {}).get('resized'),
            'Error': entry.get('error')
        })
    return pd.DataFrame(rows)

def display_summary(summary: Dict[str, Any]):
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Compared", summary.get('compared', 0))
    with col2:
        st.metric("Passed", summary.get('passed', 0))
    with col3:
        st.metric("Failed", summary.get('failed', 0))
    with col4:
        st.metric("Missing baselines", summary.get('missing_baselines', 0))

    st.caption(f"Started {summary.get('started_at')} | threshold {summary.get('threshold')} "
               f"| {summary.get('duration', 0):.1f}s")

    frame = results_frame(summary)
    if frame.empty:
        st.info("This run has no results.")
        return
    st.dataframe(frame, use_container_width=True)

    st.markdown("## 🔍 Images")
    for entry in summary['results']:
        paths = [entry.get('baseline_path'), entry.get('actual_path'), entry.get('diff_path')]
        if not any(paths):
            continue

        with st.expander(f"{STATUS_ICONS.get(entry['status'], '')} {entry['name']}",
                         expanded=entry['status'] == 'failed'):
            columns = st.columns(3)
            for column, label, path in zip(columns, ("Baseline", "Actual", "Diff"), paths):
                with column:
                    st.markdown(f"**{label}**")
                    if path and Path(path).exists():
                        st.image(path, use_container_width=True)
                    else:
                        st.info("Not available")

def display_similarity_playground():
    st.markdown("## 🔤 Text Similarity")
    col1, col2 = st.columns(2)
    with col1:
        text_a = st.text_area("Text A", "Employee information saved successfully")
    with col2:
        text_b = st.text_area("Text B", "employee information")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Levenshtein distance", levenshtein_distance(text_a, text_b))
    with col2:
        st.metric("Levenshtein similarity", f"{levenshtein_similarity(text_a, text_b):.3f}")
    with col3:
        st.metric("Relevance of A to B", f"{relevance(text_a, text_b):.3f}")

    with st.expander("Tokens"):
        st.markdown(f"**A:** {remove_stop_words(tokenize(text_a))}")
        st.markdown(f"**B:** {remove_stop_words(tokenize(text_b))}")

def main():
    st.markdown("""
    <div class="main-header">
        <h1>🖼️ HR Visual QA</h1>
        <p>Visual regression runs and text similarity checks</p>
    </div>
    """, unsafe_allow_html=True)

    st.sidebar.markdown("## 🎯 View")
    view = st.sidebar.selectbox("Choose a view", ["Visual runs", "Text similarity"])

    if view == "Text similarity":
        display_similarity_playground()
        return

    summaries = load_summaries(str(settings.SUMMARIES_DIR))
    if not summaries:
        st.info(f"No visual runs found in {settings.SUMMARIES_DIR}. "
                "Run `python main.py --mode compare --name <page>` first.")
        return

    selected = st.sidebar.selectbox(
        "Run",
        range(len(summaries)),
        format_func=lambda i: f"{summaries[i]['file']} ({summaries[i].get('passed', 0)}/{summaries[i].get('compared', 0)})"
    )

    st.sidebar.markdown("---")
    history = pd.DataFrame([{
        'Run': s.get('started_at'),
        'Passed': s.get('passed', 0),
        'Failed': s.get('failed', 0)
    } for s in summaries])
    st.sidebar.markdown("### 📈 History")
    st.sidebar.dataframe(history, use_container_width=True)

    display_summary(summaries[selected])

if __name__ == "__main__":
    main()
