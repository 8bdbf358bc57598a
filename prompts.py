from typing import Optional

# The JSON shape below is what response_parser expects back from the model.
ANALYSIS_PROMPT_TEMPLATE = """Analyze the following text and break it into a PowerPoint presentation structure. {context}

Create 5-12 slides based on the content. For each slide, provide:
1. A clear, concise title (max 10 words)
2. Key content points (2-5 bullet points or 1-2 short paragraphs)
3. Slide type (title, content, summary, etc.)

Text to analyze:
{text}

Please respond in the following JSON format:
{{
  "slides": [
    {{
      "title": "Slide Title",
      "content": ["Bullet point 1", "Bullet point 2", "Bullet point 3"],
      "type": "content",
      "notes": "Optional speaker notes"
    }}
  ],
  "totalSlides": 0,
  "presentationTitle": "Overall Presentation Title"
}}

IMPORTANT: Return ONLY the JSON object, no additional text or explanation."""


def build_analysis_prompt(text: str, guidance: Optional[str] = None) -> str:
    """Builds the instruction asking the model to outline `text` as slides in strict JSON."""
    context = f"Context: {guidance}" if guidance and guidance.strip() else ""
    return ANALYSIS_PROMPT_TEMPLATE.format(context=context, text=text)
