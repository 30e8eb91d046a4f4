ResumeRewritePrompt = """# Resume Rewrite

=====================================================================
TASK
=====================================================================

Rewrite the candidate's resume for this job and for the {target_ats} applicant tracking system.
- Format: {resume_format}. Region: {region}.
- Reorder and reword existing content; add job keywords only where the resume already evidences the skill.
- Use standard section headers (Experience, Education, Skills) and plain formatting with no tables or symbols.
- Record every change with its reason.
- Never add employers, titles, dates, degrees, certifications or metrics that are not in the original.

=====================================================================
REVISION FEEDBACK
=====================================================================

{revision_feedback}

=====================================================================
ORIGINAL RESUME (JSON)
=====================================================================

{resume_json}

=====================================================================
JOB DESCRIPTION (JSON)
=====================================================================

{jd_json}

=====================================================================
MATCHING ANALYSIS (JSON)
=====================================================================

{matching_json}

=====================================================================
ATS SCORES (JSON)
=====================================================================

{ats_json}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "format": "chronological"|"hybrid"|"functional",
  "content": <the full rewritten resume, same structure as the original resume JSON>,
  "changes": [{{"section": string, "type": "reorder"|"reword"|"add_keyword"|"format",
                "original": string, "modified": string, "reason": string}}],
  "compliance_notes": [string],
  "ats_optimizations": [string]
}}
"""

CoverLetterPrompt = """# Cover Letter Generation

=====================================================================
TASK
=====================================================================

Write a cover letter for this job from the candidate's resume.
- Length: {length} ({target_words} words). Region: {region}.
- Structure: an opening paragraph, body paragraphs mapping the candidate's strongest evidence to the role's needs, a closing paragraph.
- Personalize to the company using only facts from the job description.
- Use only achievements present in the resume.

=====================================================================
CANDIDATE'S EXISTING COVER LETTER
=====================================================================

{original_cover_letter}

=====================================================================
RESUME (JSON)
=====================================================================

{resume_json}

=====================================================================
JOB DESCRIPTION (JSON)
=====================================================================

{jd_json}

=====================================================================
MATCHING ANALYSIS (JSON)
=====================================================================

{matching_json}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "content": string,
  "paragraphs": [{{"type": "opening"|"body"|"closing", "content": string, "purpose": string}}],
  "company_personalization": [string],
  "role_alignment": [string]
}}
"""

ValidationPrompt = """# Output Validation

=====================================================================
TASK
=====================================================================

Check the generated resume and cover letter against the original resume.
- Hallucinations: skills, metrics, companies or claims in the generated text with no source in the original.
  Types: fabricated_skill, fabricated_metric, fabricated_company, exaggeration.
  Severity: critical (a false fact), warning (a stretch), info (stylistic note).
- Factuality: list every fabricated item.
- Compliance: violations of {region} hiring conventions (personal data, photo references, discriminatory content).
- recommendation is "pass" when nothing critical is found, "fix_and_retry" when regeneration could fix it, "fail" otherwise.

=====================================================================
ORIGINAL RESUME (JSON)
=====================================================================

{resume_json}

=====================================================================
GENERATED RESUME (JSON)
=====================================================================

{generated_resume_json}

=====================================================================
GENERATED COVER LETTER (JSON)
=====================================================================

{generated_cover_letter_json}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "is_valid": boolean,
  "hallucination_check": {{"passed": boolean,
                           "issues": [{{"location": string, "type": string, "original": string|null,
                                        "generated": string, "severity": "critical"|"warning"|"info"}}]}},
  "factuality_check": {{"passed": boolean, "fabricated_items": [string]}},
  "compliance_check": {{"passed": boolean, "violations": [string]}},
  "recommendation": "pass"|"fix_and_retry"|"fail"
}}
"""
