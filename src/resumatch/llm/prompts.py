from __future__ import annotations

RESUME_ANALYSIS_PROMPT = """
Analyze the following resume and extract key information.
Return strict JSON with keys:
- skills: string[]
- experience: array of objects with keys company, title, duration, description
- education: array of objects with keys institution, degree, field, year
- certifications: string[]

Resume text:
{resume_text}
""".strip()

MATCH_PROMPT = """
Given the following resume analysis and job descriptions, rank the jobs from most to least suitable match.
For each job, provide a match score (0-100) and a brief explanation of the match.

Resume analysis:
{resume_analysis_json}

Job descriptions:
{jobs_json}

Return strict JSON: an array of objects with keys:
- jobId: the "id" of the job, copied exactly
- matchScore: integer between 0 and 100
- matchReason: string explaining the match
""".strip()

IMPROVEMENTS_PROMPT = """
Given the following resume and job description, provide specific suggestions to improve the resume
to better match the job requirements. Focus on:
- Skills that should be highlighted or added
- Experience that should be emphasized
- Format or structure improvements
- Keywords that should be included

Resume text:
{resume_text}

Job description:
{job_description}

Return strict JSON with keys:
- skillSuggestions: string[]
- experienceSuggestions: string[]
- formatSuggestions: string[]
- keywordSuggestions: string[]
""".strip()
