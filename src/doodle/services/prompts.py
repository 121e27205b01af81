"""Prompt templates for every text-generation call of a research session.

Each template asks for a plain-text reply that uses the tagged-line
conventions understood by :mod:`doodle.services.parsing`.
"""

from __future__ import annotations

from langchain_core.prompts import PromptTemplate

_ACCURACY_GUIDELINES = (
    "CRITICAL INSTRUCTIONS:\n"
    "- Be factually accurate and avoid hallucination\n"
    "- Only state information you are confident about\n"
    '- Clearly mark uncertain information as "needs verification"\n'
    "- Focus on verifiable, well-established knowledge\n"
)

PLANNING_PROMPT = PromptTemplate.from_template(
    'You are a research expert creating a comprehensive learning document about "{topic}".\n\n'
    + _ACCURACY_GUIDELINES
    + "\nYour task: analyze this topic and create a research plan.\n\n"
    '1. Give a brief overview of what "{topic}" is, the appropriate level of '
    "technical depth, and the historical context or foundational concepts a "
    "reader needs.\n"
    "2. Identify 4-7 key areas that together give someone a comprehensive "
    "understanding of the topic.\n\n"
    "Respond in this exact format:\n"
    "ANALYSIS:\n"
    "[your overview in markdown]\n"
    "KEY_AREAS:\n"
    "- [first key area]\n"
    "- [second key area]\n"
    "- [...]\n"
)

RESEARCH_PROMPT = PromptTemplate.from_template(
    'You are researching "{area}" as part of a comprehensive document about "{topic}".\n\n'
    "CRITICAL GUIDELINES:\n"
    "- Provide ONLY factually accurate information\n"
    "- Include specific, real examples and case studies when possible\n"
    "- Add relevant code snippets in fenced code blocks where they help\n"
    "- Structure content with clear subheadings (### and below)\n"
    "- Make the content educational and easy to understand\n\n"
    "Recently written parts of the document, for context:\n"
    "---\n"
    "{context}\n"
    "---\n\n"
    'Write the section about "{area}" so that it integrates with the existing '
    "document. Include clear explanations with examples, real-world "
    "applications, and important considerations or best practices.\n\n"
    "Format the section in markdown without repeating the section title. "
    "Finish with a line containing only SOURCES: followed by one reference per "
    "line as a bulleted list (write \"Reference needed: [description]\" when "
    "you cannot give an exact citation).\n"
)

EVALUATION_PROMPT = PromptTemplate.from_template(
    'Evaluate the quality and completeness of this research document about "{topic}":\n\n'
    "---\n"
    "{document}\n"
    "---\n\n"
    "Rate the document on these criteria (1-10 scale):\n"
    "1. Completeness: does it cover all essential aspects?\n"
    "2. Accuracy: is the information factually correct?\n"
    "3. Clarity: is it well-written and easy to understand?\n"
    "4. Examples: are there sufficient examples and real-world cases?\n"
    "5. Structure: is it well-organized with clear sections?\n\n"
    "Respond in this exact format:\n"
    "SCORE: [average score 1-10]\n"
    "COMPLETE: [true/false - is the document comprehensive enough?]\n"
    "FEEDBACK: [one short paragraph of constructive feedback]\n"
    "MISSING_AREAS: [area names the document still lacks, separated by "
    'semicolons, or "none"]\n\n'
    "Be honest and constructive in your evaluation.\n"
)

NEXT_STEP_PROMPT = PromptTemplate.from_template(
    'Review the current research document for "{topic}" and decide what should '
    "be researched next.\n\n"
    "Current document:\n"
    "---\n"
    "{document}\n"
    "---\n\n"
    "Completed areas: {completed_areas}\n"
    "Latest feedback: {feedback}\n\n"
    "Instructions:\n"
    '1. Decide whether more research is needed ("true" or "false")\n'
    "2. If so, name the single most important area to research next\n"
    "3. Be specific about what aspect needs attention\n\n"
    "Respond in this exact format:\n"
    "HAS_MORE: [true/false]\n"
    'FOCUS: [area to research next, or "none"]\n'
    "REASON: [brief explanation]\n"
)

EXTRA_KNOWLEDGE_PROMPT = PromptTemplate.from_template(
    'Based on research about "{topic}" covering these areas: {areas}, create an '
    '"Extra Knowledge" section that includes:\n\n'
    "1. Related advanced concepts that would interest someone learning about {topic}\n"
    "2. Recent developments or emerging trends in the field\n"
    "3. Connections to other fields or domains\n"
    "4. Non-obvious insights that experts know\n"
    "5. Where the field might be heading\n\n"
    "Guidelines:\n"
    "- Keep it factual; clearly mark predictions as such\n"
    "- Include specific examples and real applications\n"
    "- Structure it with ### subheadings\n\n"
    "Return only the section body in markdown, without a top-level heading.\n"
)

SYNTHESIS_PROMPT = PromptTemplate.from_template(
    'Polish and finalize this research document about "{topic}".\n\n'
    "Researched sections:\n"
    "---\n"
    "{document}\n"
    "---\n\n"
    "Extra knowledge:\n"
    "---\n"
    "{extra_knowledge}\n"
    "---\n\n"
    "Your tasks:\n"
    "1. Add a compelling introduction that summarizes the key learning outcomes\n"
    "2. Add a table of contents linking to every section\n"
    "3. Merge the sections so they flow logically, keeping every section's content\n"
    "4. Keep the extra knowledge as its own section\n"
    '5. Include a "References and Further Reading" section built from the sources\n'
    "6. Add a conclusion\n"
    "7. Make sure code blocks and formatting are consistent\n\n"
    "Return the complete, polished document in markdown.\n"
)


def planning_prompt(topic: str) -> str:
    return PLANNING_PROMPT.format(topic=topic)


def research_prompt(topic: str, area: str, context: str) -> str:
    return RESEARCH_PROMPT.format(
        topic=topic,
        area=area,
        context=context or "(nothing written yet)",
    )


def evaluation_prompt(topic: str, document: str) -> str:
    return EVALUATION_PROMPT.format(topic=topic, document=document or "(empty document)")


def next_step_prompt(
    topic: str,
    document: str,
    completed_areas: list[str],
    feedback: str = "",
) -> str:
    return NEXT_STEP_PROMPT.format(
        topic=topic,
        document=document or "(empty document)",
        completed_areas=", ".join(completed_areas) or "none",
        feedback=feedback or "none",
    )


def extra_knowledge_prompt(topic: str, areas: list[str]) -> str:
    return EXTRA_KNOWLEDGE_PROMPT.format(topic=topic, areas=", ".join(areas) or topic)


def synthesis_prompt(topic: str, document: str, extra_knowledge: str) -> str:
    return SYNTHESIS_PROMPT.format(
        topic=topic,
        document=document,
        extra_knowledge=extra_knowledge,
    )
