"""Prompts and localized strings for the research pipeline.

Every user-facing string exists in English and Korean. Language only
changes wording; it never changes control flow.
"""

from neuro_scholar.state.enums import MessageRole, ReportLanguage
from neuro_scholar.state.models import AcademicSource, ChatMessage, PlanSection, SectionResult

EN = ReportLanguage.EN
KO = ReportLanguage.KO


# =============================================================================
# Status Messages and Headings
# =============================================================================

STATUS_MESSAGES: dict[str, dict[ReportLanguage, str]] = {
    "planning": {
        EN: "Creating research plan...",
        KO: "연구 계획 작성 중...",
    },
    "synthesizing": {
        EN: "Synthesizing report...",
        KO: "보고서 종합 중...",
    },
    "summary": {
        EN: "Writing executive summary...",
        KO: "요약 작성 중...",
    },
    "validating": {
        EN: "Validating DOI citations against searched sources...",
        KO: "DOI 인용 정합성 확인 중...",
    },
}

SUMMARY_HEADINGS = {
    EN: "## Executive Summary",
    KO: "## 요약",
}

NO_SOURCES_REPORTS = {
    EN: (
        "## Report Unavailable\n\n"
        "No DOI-verified sources were found during search, so a report cannot be "
        "generated safely. Please refine or broaden the query and try again.\n"
    ),
    KO: (
        "## 보고서 생성 불가\n\n"
        "검색 단계에서 DOI가 확인된 문헌을 찾지 못해 보고서를 생성할 수 없습니다. "
        "검색 질의어를 더 구체화하거나 범위를 넓혀 다시 시도하세요.\n"
    ),
}

PAUSED_MESSAGE = "Research paused"
RESUMED_MESSAGE = "Research resumed"
CANCELLED_MESSAGE = "Research cancelled by user"
QUERY_UPDATED_MESSAGE = "Query updated. Please restart research with the new query."


def status_message(key: str, language: ReportLanguage) -> str:
    return STATUS_MESSAGES[key][language]


# =============================================================================
# System Prompts
# =============================================================================

PLANNING_PROMPTS = {
    EN: """You are an expert research planner for psychiatry and neuroscience.
Given a research query, write the table of contents for a comprehensive academic review.

Requirements:
1. Stay within psychiatry, neuroscience and adjacent biomedical fields
2. Make each section specific enough to drive a targeted literature search
3. Cover background, key findings, methodological considerations and clinical implications
4. Use professional academic terminology
5. Aim for 4-6 focused sections
6. Do NOT include "Executive Summary", "Summary", "Abstract", "References" or "Bibliography" sections; they are generated automatically

Respond with a JSON object in exactly this format:
{
  "sections": [
    {"title": "Section Title", "description": "What this section covers"}
  ]
}""",
    KO: """당신은 정신의학과 신경과학 분야의 연구 계획 전문가입니다.
연구 질문이 주어지면 종합적인 학술 리뷰를 위한 목차를 작성하세요.

요구사항:
1. 정신의학, 신경과학 및 관련 생의학 분야에 집중
2. 각 섹션은 타겟 문헌 검색을 안내할 수 있을 만큼 구체적으로 작성
3. 배경, 주요 연구 결과, 방법론적 고려사항, 임상적 함의를 포함
4. 전문적인 학술 용어 사용
5. 4-6개의 집중된 섹션
6. "요약", "Executive Summary", "참고문헌", "References" 섹션은 포함하지 마세요 (자동 생성됨)
7. 섹션 제목과 설명은 반드시 한국어로 작성하세요

다음 형식의 JSON 객체로만 응답하세요:
{
  "sections": [
    {"title": "섹션 제목", "description": "이 섹션에서 다루는 내용"}
  ]
}""",
}

KEYWORD_PROMPTS = {
    EN: """You are an academic search specialist. Given a report section title and description, produce exactly 4 search keywords for finding relevant papers.

Requirements:
1. Choose only the 4 keywords that best capture the core concepts
2. Order them by importance, most important first
3. Use scientific and medical terminology suited to PubMed
4. Prefer specific terms: drug names, brain regions, methods
5. Return ONLY a comma-separated list of the 4 keywords, with no explanation and no bullets

Example output:
neuroplasticity, structural MRI, depression treatment, BDNF""",
    KO: """당신은 학술 검색 전문가입니다. 보고서 섹션의 제목과 설명이 주어지면 관련 논문 검색을 위한 키워드를 정확히 4개 생성하세요.

요구사항:
1. 핵심 개념을 가장 잘 나타내는 키워드 4개만 선택
2. 중요도 순으로 정렬 (가장 중요한 키워드가 첫 번째)
3. PubMed 검색에 적합한 과학/의학 용어 사용
4. 약물명, 뇌 영역, 방법론 등 구체적인 용어 우선
5. 쉼표로 구분된 키워드 4개만 반환 (설명, 글머리 기호 없음)

출력 예시:
neuroplasticity, structural MRI, depression treatment, BDNF""",
}

SYNTHESIS_PROMPTS = {
    EN: """You are a senior academic researcher writing for psychiatry and neuroscience professionals.

Requirements:
1. Use terminology appropriate for peer-reviewed literature
2. Prefer accuracy and precision over accessibility
3. Every factual claim carries an inline DOI citation in exactly this format: (DOI: 10.xxxx/xxxxx)
4. No footnotes or reference numbers; put the DOI at the point of citation
5. Synthesize across sources rather than summarizing them one by one
6. Where sources disagree, present the disagreement and cite both
7. Weigh methodology quality and strength of evidence
8. Write formal academic prose suitable for a review article
9. Do NOT include section titles, headings or markdown headers (##); write body text only
10. Do NOT append a references or bibliography list

DOI accuracy:
- Use ONLY DOIs from the provided source list
- Never invent, guess or alter a DOI
- If unsure of a DOI, omit the citation
- Copy DOIs character for character""",
    KO: """당신은 정신의학 및 신경과학 전문가를 위해 글을 쓰는 선임 학술 연구자입니다.

요구사항:
1. 동료 심사 문헌에 적합한 전문 용어 사용
2. 접근성보다 정확성과 정밀성 우선
3. 모든 사실적 주장에는 다음 형식의 인라인 DOI 인용 포함: (DOI: 10.xxxx/xxxxx)
4. 각주나 참조 번호 없이 인용 위치에 DOI를 직접 삽입
5. 출처를 하나씩 요약하지 말고 여러 출처의 결과를 종합
6. 출처 간 상충되는 내용은 양쪽 DOI와 함께 제시
7. 방법론의 질과 근거의 강도를 고려
8. 리뷰 논문에 적합한 공식적인 학술 문체
9. 본문은 반드시 한국어로 작성하되 DOI, 논문 제목, 저자명은 원문 그대로 유지
10. 섹션 제목, 헤더, 마크다운 제목(##)을 넣지 말고 본문만 작성
11. 참고문헌 목록을 덧붙이지 마세요

DOI 정확성:
- 제공된 출처 목록의 DOI만 사용
- DOI를 만들거나 추측하거나 수정하지 마세요
- 확실하지 않으면 인용을 생략
- DOI를 글자 그대로 복사""",
}


# =============================================================================
# Message Builders
# =============================================================================


def _messages(system: str | None, user: str) -> list[ChatMessage]:
    messages = []
    if system:
        messages.append(ChatMessage(role=MessageRole.SYSTEM, content=system))
    messages.append(ChatMessage(role=MessageRole.USER, content=user))
    return messages


def build_plan_messages(query: str, language: ReportLanguage) -> list[ChatMessage]:
    user = (
        f"다음 주제에 대한 연구 계획을 작성하세요: {query}"
        if language == KO
        else f"Create a research plan for: {query}"
    )
    return _messages(PLANNING_PROMPTS[language], user)


def build_keyword_messages(section: PlanSection, language: ReportLanguage) -> list[ChatMessage]:
    if language == KO:
        user = (
            f"섹션 제목: {section.title}\n"
            f"섹션 설명: {section.description}\n\n"
            "이 주제로 학술 논문을 검색할 키워드를 생성하세요."
        )
    else:
        user = (
            f"Section Title: {section.title}\n"
            f"Section Description: {section.description}\n\n"
            "Generate search keywords for finding academic papers on this topic."
        )
    return _messages(KEYWORD_PROMPTS[language], user)


def format_sources_context(sources: list[AcademicSource]) -> str:
    """Source list shown to the model when writing a section."""
    return "\n\n".join(
        f"- {s.title} (DOI: {s.doi})\n"
        f"  Authors: {', '.join(s.authors) or 'N/A'}\n"
        f"  Journal: {s.journal} ({s.year or 'n.d.'})\n"
        f"  Abstract: {s.abstract or 'N/A'}"
        for s in sources
    )


def format_doi_context(sources: list[AcademicSource]) -> str:
    """One ``doi: authors (year) - title`` line per source."""
    return "\n".join(
        f"{s.doi}: {', '.join(s.authors)} ({s.year}) - {s.title}" for s in sources
    )


def build_section_messages(
    section: PlanSection,
    sources: list[AcademicSource],
    language: ReportLanguage,
) -> list[ChatMessage]:
    sources_context = format_sources_context(sources)
    doi_list = ", ".join(s.doi for s in sources)
    if language == KO:
        user = (
            f'학술 연구 보고서의 "{section.title}" 섹션을 작성하세요.\n\n'
            f"섹션 초점: {section.description}\n\n"
            f"사용 가능한 출처 (인라인 인용에 DOI 사용):\n{sources_context}\n\n"
            f"허용된 DOI 목록: {doi_list}\n\n"
            "반드시 지켜야 할 사항:\n"
            "1. 위 목록에 있는 DOI만 사용하세요\n"
            "2. DOI를 만들어내거나 수정하지 마세요\n"
            "3. 인용 형식: (DOI: 10.xxxx/xxxxx)\n"
            "4. 모든 주장에 출처 DOI를 인라인으로 인용하세요\n"
            "5. 본문은 한국어로 작성하되 DOI와 논문 제목은 원문 그대로 유지하세요"
        )
    else:
        user = (
            f'Write the "{section.title}" section of an academic research report.\n\n'
            f"Section Focus: {section.description}\n\n"
            f"Available Sources (use DOIs for inline citations):\n{sources_context}\n\n"
            f"Allowed DOI list: {doi_list}\n\n"
            "Instructions:\n"
            "1. ONLY use DOIs from the list above\n"
            "2. Do NOT fabricate or modify DOIs\n"
            "3. Citation format: (DOI: 10.xxxx/xxxxx)\n"
            "4. Every claim must cite its source DOI inline"
        )
    return _messages(SYNTHESIS_PROMPTS[language], user)


def build_summary_messages(
    query: str,
    sections: list[SectionResult],
    sources: list[AcademicSource],
    language: ReportLanguage,
    preview_chars: int = 500,
) -> list[ChatMessage]:
    previews = "\n\n".join(
        f"## {s.title}\n{s.content[:preview_chars]}..." for s in sections
    )
    doi_context = format_doi_context(sources)
    if language == KO:
        user = (
            f'다음 주제의 연구 보고서에 대한 요약(2-3 문단)을 한국어로 작성하세요: "{query}"\n\n'
            f"섹션별 주요 발견:\n{previews}\n\n"
            f"사용 가능한 DOI 목록 (이 목록의 DOI만 사용):\n{doi_context}\n\n"
            "지시사항:\n"
            "1. 반드시 한국어로 작성하세요\n"
            "2. 위 목록에 있는 DOI만 사용하세요\n"
            "3. DOI를 만들어내지 마세요"
        )
    else:
        user = (
            f'Write an executive summary (2-3 paragraphs) for a research report on: "{query}"\n\n'
            f"Key findings from sections:\n{previews}\n\n"
            f"Available DOIs (ONLY use DOIs from this list):\n{doi_context}\n\n"
            "Only use DOIs from the list above. Do not fabricate DOIs."
        )
    return _messages(SYNTHESIS_PROMPTS[language], user)


def build_title_messages(query: str) -> list[ChatMessage]:
    user = (
        f'Generate a short (5-7 words) title for a research report about: "{query}"\n'
        "Reply with ONLY the title, no quotes or extra text."
    )
    return _messages(None, user)
