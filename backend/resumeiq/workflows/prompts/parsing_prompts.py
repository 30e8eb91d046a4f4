ResumeParsingPrompt = """# Resume Parsing

=====================================================================
TASK
=====================================================================

Parse the resume text below into structured data.
- Give every experience, bullet, education entry and project a short stable id (exp-1, exp-1-b1, edu-1, proj-1).
- Keep bullet text verbatim in "original".
- Extract metrics (percentages, counts, currency, durations) that appear in a bullet; set is_inferred to false.
- Group skills into categories as the resume does, or by type when it does not.

=====================================================================
RESUME TEXT
=====================================================================

{resume_text}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "contact": {{"name": string, "email": string|null, "phone": string|null, "location": string|null,
               "linkedin": string|null, "github": string|null, "portfolio": string|null}},
  "summary": string|null,
  "experience": [{{"id": string, "company": string, "title": string, "location": string|null,
                   "start_date": string|null, "end_date": string|null, "current": boolean,
                   "bullets": [{{"id": string, "original": string, "action_verb": string|null,
                                 "impact_level": "high"|"medium"|"low",
                                 "metrics": [{{"value": string, "type": "percentage"|"number"|"currency"|"time"|"scale",
                                              "context": string, "is_inferred": boolean}}]}}],
                   "technologies": [string]}}],
  "education": [{{"id": string, "institution": string, "degree": string, "field": string|null,
                  "gpa": string|null, "start_date": string|null, "end_date": string|null, "honors": [string]}}],
  "skills": [{{"category": string, "skills": [{{"name": string, "proficiency": string|null,
                                              "years_of_experience": number|null, "last_used": string|null}}]}}],
  "certifications": [{{"name": string, "issuer": string, "date": string|null,
                       "expiration_date": string|null, "credential_id": string|null}}],
  "projects": [{{"id": string, "name": string, "description": string, "technologies": [string],
                 "url": string|null, "start_date": string|null, "end_date": string|null}}],
  "awards": [{{"name": string, "issuer": string, "date": string|null, "description": string|null}}],
  "languages": [{{"language": string, "proficiency": "native"|"fluent"|"professional"|"conversational"|"basic"}}]
}}
"""

JobDescriptionParsingPrompt = """# Job Description Parsing

=====================================================================
TASK
=====================================================================

Parse the job posting below into structured data.
- Split requirements into required, preferred and nice_to_have.
- Give each requirement an id (req-1, pref-1, nice-1), a category and the concrete skills it names.
- Category is one of: skill, experience, education, certification, soft_skill, other.
- Seniority level is one of: intern, entry, mid, senior, staff, principal, director, vp, c-level.

Source: {source}
Source URL: {source_url}

=====================================================================
JOB POSTING
=====================================================================

{jd_text}

=====================================================================
OUTPUT FORMAT
=====================================================================

{{
  "title": string,
  "company": {{"name": string, "industry": string|null, "size": "startup"|"mid"|"enterprise"|null, "description": string|null}},
  "location": {{"type": "remote"|"hybrid"|"onsite"|"not_specified", "primary": string|null,
                "additional_locations": [string], "relocation_offered": boolean|null, "visa_sponsorship": boolean|null}},
  "seniority": {{"level": string, "years_experience_min": number|null, "years_experience_max": number|null}},
  "compensation": {{"specified": boolean, "salary_min": number|null, "salary_max": number|null, "currency": string|null,
                    "type": "annual"|"hourly"|"contract"|null, "equity": boolean|null, "bonus": boolean|null}},
  "requirements": {{
    "required": [{{"id": string, "text": string, "category": string, "skills": [string], "years_required": number|null}}],
    "preferred": [...],
    "nice_to_have": [...]
  }},
  "responsibilities": [string],
  "benefits": [string],
  "application_deadline": string|null
}}
"""
