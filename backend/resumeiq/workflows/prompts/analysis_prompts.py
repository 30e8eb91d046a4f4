FakeJobDetectionPrompt = """# Job Posting Authenticity Check

=====================================================================
TASK
=====================================================================

Assess whether this job posting is fake, a scam or simply low quality.

Red flags for fake postings: unrealistic compensation, vague or missing company details, excessive urgency,
requests for personal financial information, upfront payments, suspicious contact domains,
no concrete responsibilities, copy-paste generic text.

Quality issues: unclear role definition, contradictory requirements, missing experience level,
no named technologies, skill lists that cover everything, very short description, requirements that do not fit the title.

Rules:
- is_fake is true only when fake_confidence > 0.7
- Quality issues alone do not make a posting fake
- quality_score runs from 0 (unusable) to 100 (exemplary)

Source: {source}

=====================================================================
JOB POSTING
=====================================================================

{jd_text}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "is_fake": boolean,
  "fake_confidence": number,
  "fake_indicators": [string],
  "quality_score": number,
  "quality_issues": [string],
  "red_flags": [string],
  "reasoning": string
}}
"""

MultiRolePrompt = """# Multi-Role Detection

=====================================================================
TASK
=====================================================================

Decide whether this job posting describes one role or several distinct roles.
For each distinct role give its title, the requirements specific to it, and your confidence (0-1) that it is separate.

=====================================================================
JOB POSTING
=====================================================================

{jd_text}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "is_multi_role": boolean,
  "roles": [{{"title": string, "confidence": number, "matching_requirements": [string]}}],
  "primary_role": string|null,
  "reasoning": string
}}
"""

MatchAnalysisPrompt = """# Resume to Job Matching

=====================================================================
TASK
=====================================================================

Compare the candidate's resume with the job description.
- Skills: which requirements are matched (quote the resume evidence), which are missing, which are transferable.
- Experience: years required vs the candidate's relevant years; which roles are relevant and why.
- Education: required level vs the candidate's.
- Role alignment: title fit and seniority fit.
- overall_score runs from 0 to 100.

=====================================================================
RESUME (JSON)
=====================================================================

{resume_json}

=====================================================================
JOB DESCRIPTION (JSON)
=====================================================================

{jd_json}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "overall_score": number,
  "explanation": string,
  "skill_match": {{
    "matched_skills": [{{"skill": string, "jd_requirement": string, "resume_evidence": string, "strength": "strong"|"moderate"|"weak"}}],
    "missing_skills": [{{"skill": string, "jd_requirement": string, "importance": "required"|"preferred"|"nice_to_have", "suggestion": string|null}}],
    "transferable_skills": [{{"candidate_skill": string, "target_skill": string, "transferability": number, "justification": string}}],
    "total_required": number, "total_matched": number, "match_percentage": number
  }},
  "experience_match": {{
    "years_required": number|null, "years_candidate": number, "match_status": "exceeds"|"meets"|"below"|"unknown",
    "relevant_experiences": [{{"experience_id": string, "company": string, "title": string,
                              "relevance_score": number, "matching_responsibilities": [string]}}]
  }},
  "education_match": {{"required": string|null, "candidate": string,
                       "match_status": "exceeds"|"meets"|"below"|"not_required", "notes": string|null}},
  "role_alignment": {{
    "title_match": {{"jd_title": string, "resume_title": string, "alignment_score": number,
                     "is_lateral_move": boolean, "is_promotion": boolean, "is_career_change": boolean}},
    "seniority_match": {{"jd_level": string, "candidate_level": string,
                         "match_status": "over_qualified"|"qualified"|"under_qualified"|"unknown"}}
  }}
}}
"""

RiskAnalysisPrompt = """# Strengths, Gaps and Risks

=====================================================================
TASK
=====================================================================

From the resume, the job description and the matching analysis, list:
- strengths the candidate should lead with, each with resume evidence
- gaps against the job requirements, each with a severity and a mitigation where one exists
- risks a recruiter might raise (experience, skill, culture, logistics, other), each with a recommendation
Then give an overall risk level.

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
  "strengths": [{{"title": string, "description": string, "evidence": string, "impact": "low"|"medium"|"high"}}],
  "gaps": [{{"title": string, "description": string, "jd_requirement": string,
             "severity": "critical"|"moderate"|"minor", "mitigation": string|null}}],
  "risks": [{{"title": string, "description": string, "category": "experience"|"skill"|"culture"|"logistics"|"other",
              "severity": "low"|"medium"|"high", "recommendation": string}}],
  "overall_risk_level": "low"|"medium"|"high"
}}
"""
