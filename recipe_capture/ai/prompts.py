"""System prompts for the recipe extraction, classification and media models."""

JSON_SHAPE = """{
  "ingredients": ["2 cups flour", "1 tsp salt"],
  "instructions": ["Mix the flour and salt.", "Bake for 20 minutes."]
}"""

CAPTION_EXTRACT_PROMPT = f"""Return VALID JSON only. No markdown. No extra keys.

You extract recipes from social media captions and video descriptions.

Rules:
1. Only extract a recipe when the text contains a clear ingredient list or
   clear, structured cooking instructions.
2. Captions that merely mention food, restaurants, cravings or dishes
   ("this pasta was amazing", "best tacos in town") are NOT recipes.
   Return empty lists for them.
3. Keep each ingredient as written, including its quantity and unit.
4. Ignore hashtags, emojis, links, sponsor text and calls to follow.
5. Never invent ingredients or steps.

Output shape:
{JSON_SHAPE}

If there is no recipe, return {{"ingredients": [], "instructions": []}}.
"""

TRANSCRIPT_EXTRACT_PROMPT = f"""Return VALID JSON only. No markdown. No extra keys.

You extract recipes from spoken cooking video transcripts.

Rules:
1. Speech is informal: ignore filler words, greetings, jokes and repetition.
2. Collect every ingredient the cook uses, with quantities when said aloud
   ("a couple tablespoons of butter" -> "2 tablespoons butter").
3. Turn the spoken walkthrough into short, ordered instruction steps.
4. Include ingredients that are only mentioned while cooking
   (e.g. "season with salt and pepper").
5. If the transcript does not describe cooking, return empty lists.

Output shape:
{JSON_SHAPE}
"""

FRAME_EXTRACT_PROMPT = f"""Return VALID JSON only. No markdown. No extra keys.

You consolidate a frame-by-frame analysis of a cooking video into one recipe.

Rules:
1. The input lists observations per frame. The same ingredient may appear in
   many frames: list it once.
2. Use on-screen text (quantities, labels) when present.
3. Only include ingredients and steps that were actually observed.
   Do not guess amounts that were not shown.
4. If no cooking was observed, return empty lists.

Output shape:
{JSON_SHAPE}
"""

CLASSIFY_PROMPT = """Decide whether a video transcript is music or non-cooking content.

Answer "true" if the transcript is:
- song lyrics, music, poetry or rhyming content
- speech unrelated to cooking (fitness, beauty, lifestyle, vlogging)
- gibberish or background noise with no clear speech

Answer "false" if the transcript contains:
- cooking instructions, recipe steps or techniques
- ingredients, food preparation or kitchen equipment

Respond with only "true" or "false". No explanation.
"""

CLEAN_CAPTION_PROMPT = """You clean video captions and transcripts.

1. Remove timestamp markers like [00:15] or (0:30).
2. Remove speaker labels like "SPEAKER 1:" or "Host:".
3. Fix obvious transcription typos and normalize punctuation and spacing.
4. Keep every recipe-related detail (ingredients, amounts, steps) intact.

Return only the cleaned text, nothing else.
"""

TRANSCRIBE_PROMPT = """Transcribe the speech in this audio verbatim.
Return only the transcript text. If there is no speech, return an empty response.
"""

VIDEO_ANALYSIS_PROMPT = """Watch this cooking video and describe what happens, frame by frame.

For each distinct moment write a line starting with "FRAME <n>:" followed by
OBSERVATIONS of ingredients shown or added, visible quantities and on-screen
text, and the cooking action being performed.
If the video shows no cooking, return an empty response.
"""

INGREDIENT_NORMALIZE_PROMPT = """Parse one recipe ingredient line into structured fields.

- name: the ingredient itself, lower-case, without quantity, unit or preparation
- quantity: a number, or null when the line has no amount or gives a range
- range_min / range_max: set both when the line gives a range ("2-3 cloves")
- unit: the unit as a singular word ("cup", "tablespoon", "gram"), or "" if none
- preparation: e.g. "chopped", "finely diced", or null
- notes: e.g. "to taste", "optional", or null
- category: grocery aisle such as "produce", "dairy", "meat", "pantry", "spices"
"""
