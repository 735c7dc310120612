"""Streamlit Web UI for gap-tailor.

Flow: upload resume -> load job (URL or manual) -> gap questions -> tailor
-> review/edit bullets -> download PDF or DOCX. All state lives in one
TailorSession per browser session.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets -> os.environ so the model client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except (KeyError, FileNotFoundError):
        logger.debug("No ANTHROPIC_API_KEY in Streamlit secrets")

from gap_tailor.config import load_config
from gap_tailor.errors import GapTailorError
from gap_tailor.export import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE, download_filename
from gap_tailor.pipeline.gap_resolution import Choice, GapResolution, Phase, run_gap_analysis
from gap_tailor.pipeline.orchestrator import TailorOrchestrator
from gap_tailor.session import TailorSession

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Resume Tailor",
    page_icon=":page_facing_up:",
    layout="wide",
)

if "session" not in st.session_state:
    st.session_state.session = TailorSession()
if "resolution" not in st.session_state:
    st.session_state.resolution = None
if "gaps_skipped" not in st.session_state:
    st.session_state.gaps_skipped = False

session: TailorSession = st.session_state.session
config = load_config()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_orchestrator() -> TailorOrchestrator:
    # A fresh client per action: every asyncio.run gets its own event loop
    return TailorOrchestrator.from_config(config)


def _reset_resolution() -> None:
    st.session_state.resolution = None
    st.session_state.gaps_skipped = False


def _show_error(exc: GapTailorError) -> None:
    st.error(exc.message)


# ---------------------------------------------------------------------------
# Sidebar: resume upload
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Resume Tailor")
    st.caption("Tailor your resume to a job posting")

    resume_file = st.file_uploader(
        "Upload your resume",
        type=["pdf", "docx", "tex", "latex"],
        help=f"PDF, DOCX or LaTeX ({config.limits.max_upload_mb}MB max)",
    )
    if resume_file is not None and (
        session.resume is None or session.resume.filename != resume_file.name
    ):
        try:
            _get_orchestrator().upload_resume(
                session, resume_file.getvalue(), resume_file.name, resume_file.type
            )
            _reset_resolution()
        except GapTailorError as exc:
            _show_error(exc)

    if session.resume is not None:
        st.success(f"{session.resume.filename} ({len(session.resume.content)} characters)")
        with st.expander("Extracted text"):
            st.text(session.resume.content)

    if st.button("Start over"):
        st.session_state.session = TailorSession()
        _reset_resolution()
        st.rerun()


# ---------------------------------------------------------------------------
# Step 1: job posting
# ---------------------------------------------------------------------------

st.header("1. Job posting")

url_tab, manual_tab = st.tabs(["From URL", "Enter manually"])

with url_tab:
    job_url = st.text_input("Job posting URL", placeholder="https://...")
    if st.button("Fetch job", disabled=not job_url or session.is_running("fetch-job")):
        with st.spinner("Fetching job posting..."):
            try:
                asyncio.run(_get_orchestrator().load_job_from_url(session, job_url))
                _reset_resolution()
            except GapTailorError as exc:
                _show_error(exc)
                st.info("You can enter the job posting manually instead.")

with manual_tab:
    with st.form("manual_job"):
        manual_title = st.text_input("Job title")
        manual_company = st.text_input("Company")
        manual_description = st.text_area("Job description", height=200)
        if st.form_submit_button("Use this job"):
            try:
                _get_orchestrator().load_job_manual(
                    session, manual_title, manual_company, manual_description
                )
                _reset_resolution()
            except GapTailorError as exc:
                _show_error(exc)

if session.job is not None:
    st.success(f"{session.job.title} at {session.job.company}")
    with st.expander("Job description"):
        st.text(session.job.text_for_model[:5000])

if not session.ready_to_tailor:
    st.info("Upload a resume and load a job posting to continue.")
    st.stop()


# ---------------------------------------------------------------------------
# Step 2: gap analysis
# ---------------------------------------------------------------------------

st.header("2. Gap analysis")

resolution: GapResolution | None = st.session_state.resolution

if resolution is None and not st.session_state.gaps_skipped:
    col_start, col_skip = st.columns(2)
    if col_start.button("Analyze gaps", type="primary"):
        resolution = GapResolution(on_complete=session.record_gap_answers)
        st.session_state.resolution = resolution
    if col_skip.button("Skip gap analysis"):
        session.record_gap_answers([])
        st.session_state.gaps_skipped = True

if resolution is not None and resolution.phase is Phase.ANALYZING:
    inputs = session.snapshot()
    orchestrator = _get_orchestrator()

    async def _analyze():
        result = await orchestrator.run_analysis(
            inputs.resume_text, inputs.job.text_for_model, inputs.job.title, inputs.job.company
        )
        session.record_gap_analysis(result)
        return result

    with st.spinner("Comparing your experience against the job requirements..."):
        asyncio.run(run_gap_analysis(resolution, _analyze))

if resolution is not None and resolution.phase is Phase.ERROR:
    st.error(resolution.error)
    col_skip, col_retry = st.columns(2)
    if col_skip.button("Skip Gap Analysis"):
        resolution.skip()
        st.rerun()
    if col_retry.button("Try Again"):
        resolution.retry()
        st.rerun()

if resolution is not None and resolution.phase is Phase.NO_GAPS:
    st.success("No significant gaps found. Your resume already covers the key requirements.")
    if st.button("Continue"):
        resolution.continue_()
        st.rerun()

if resolution is not None and resolution.phase is Phase.QUESTIONS:
    question = resolution.current_question
    if resolution.analysis.matched_skills:
        st.caption("Matched: " + ", ".join(resolution.analysis.matched_skills))
    st.progress(
        resolution.question_number / resolution.total,
        text=f"Question {resolution.question_number} of {resolution.total} "
        f"({question.priority.value} priority)",
    )
    st.subheader(question.question)
    st.caption(question.context)

    if resolution.choice is Choice.UNANSWERED:
        col_yes, col_no = st.columns(2)
        if col_yes.button("Yes, I have experience"):
            resolution.choose_has_experience()
            st.rerun()
        if col_no.button("No, I don't"):
            resolution.choose_no_experience()
            st.rerun()
    else:
        if resolution.choice is Choice.HAS_EXPERIENCE:
            response = st.text_area(
                f"Briefly describe your experience with {question.skill}:",
                value=resolution.response,
                placeholder=f'e.g., "I used {question.skill} at my previous job to..."',
                key=f"response-{question.id}",
            )
            resolution.set_response(response)
            st.caption("This will be woven into your existing experience bullets.")
        else:
            st.info(
                f"No problem. {resolution.compensation_note}. "
                "Your resume will still be optimized for this role."
            )

        col_change, col_next = st.columns(2)
        if col_change.button("Change answer"):
            resolution.revert()
            st.rerun()
        last = resolution.question_number == resolution.total
        if col_next.button(
            "Finish & Tailor Resume" if last else "Next Question",
            type="primary",
            disabled=not resolution.can_submit,
        ):
            resolution.submit()
            st.rerun()

    if st.button(f"Skip remaining {resolution.remaining} questions"):
        resolution.skip()
        st.rerun()

if st.session_state.gaps_skipped:
    st.caption("Gap analysis skipped.")
elif resolution is None or resolution.phase is not Phase.COMPLETE:
    st.stop()
else:
    st.success(f"Gap analysis done ({len(resolution.result or [])} answers).")


# ---------------------------------------------------------------------------
# Step 3: tailoring
# ---------------------------------------------------------------------------

st.header("3. Tailored resume")

if st.button(
    "Tailor resume" if session.tailored is None else "Tailor again",
    type="primary",
    disabled=session.is_running("tailor"),
):
    with st.spinner("Tailoring your resume..."):
        try:
            asyncio.run(_get_orchestrator().tailor(session))
        except GapTailorError as exc:
            _show_error(exc)

tailored = session.tailored
if tailored is None:
    st.stop()

if tailored.summary:
    st.info(tailored.summary)
if tailored.key_matches:
    st.caption("Key matches: " + ", ".join(tailored.key_matches))

for s_index, section in enumerate(tailored.sections):
    st.subheader(section.title)
    for b_index, (original, rewritten, rec) in enumerate(section.rows()):
        col_orig, col_new = st.columns(2)
        col_orig.markdown(original or "_N/A_")
        if rewritten is None:
            continue
        label = f"Tailored ({rec.value} recommended)" if rec else "Tailored"
        edited = col_new.text_area(label, value=rewritten, key=f"bullet-{s_index}-{b_index}")
        if edited != rewritten:
            session.edit_bullet(s_index, b_index, edited)
    with st.expander("Copy section"):
        st.code(session.tailored.sections[s_index].as_text(), language=None)

with st.expander("Copy all"):
    st.code(session.tailored.as_text(), language=None)

col_pdf, col_docx = st.columns(2)
try:
    orchestrator = _get_orchestrator()
    col_pdf.download_button(
        "Download PDF",
        data=orchestrator.render_pdf(session),
        file_name=download_filename(session.job.company, "pdf"),
        mime=PDF_MEDIA_TYPE,
    )
    col_docx.download_button(
        "Download DOCX",
        data=orchestrator.render_docx(session),
        file_name=download_filename(session.job.company, "docx"),
        mime=DOCX_MEDIA_TYPE,
    )
except GapTailorError as exc:
    _show_error(exc)
