import math
import re

ROUND_KEYS = {1: "round_one", 2: "round_two", 3: "round_three", 4: "round_four"}
MISSED = re.compile(r"CUT|WD|DQ", re.IGNORECASE)
POSITION_NUMBER = re.compile(r"\d+")
GOLD = 1
SILVER = 2
SILVER_PAYOUT_OFFSET = 75
GOLD_STARTING_STROKES = 30
SILVER_STARTING_STROKES = 40


def half_up(value, places=0):
    """Round half up (toward positive infinity), so -2.5 becomes -2."""
    if value is None:
        return None
    factor = 10 ** places
    result = math.floor(value * factor + 0.5) / factor
    return int(result) if places == 0 else result


def average(values):
    values = [value for value in values if value is not None and math.isfinite(value)]
    return sum(values) / len(values) if values else 0


def is_active_golfer(golfer):
    position = golfer.get("position")
    return not (position and MISSED.search(position))


def selection_count(event_index, round_number):
    """How many golfers count toward a team's round."""
    if event_index <= 1:
        return 10 if round_number <= 2 else 5
    if event_index == 2:
        return 5
    return 3


def position_number(position):
    match = POSITION_NUMBER.search(position) if position else None
    return int(match.group(0)) if match else None


def tied_labels(entries):
    """
    Label entries by ascending score: ["1", "T2", "T2", "4"]. Entries without a
    score are left out.
    """
    scored = sorted((entry for entry in entries if entry["score"] is not None), key=lambda e: e["score"])
    labels = {}
    i = 0
    while i < len(scored):
        j = i + 1
        while j < len(scored) and scored[j]["score"] == scored[i]["score"]:
            j += 1
        label = ("T" if j - i > 1 else "") + str(i + 1)
        for entry in scored[i:j]:
            labels[entry["team_id"]] = label
        i = j
    return labels


def tied_award(table, position, count, offset=0):
    """Average the table over the slots a tie occupies, starting at the tied position."""
    start = position - 1 + offset
    if count <= 0:
        return 0
    return sum(table[start + i] if start + i < len(table) else 0 for i in range(count)) / count


def award(entries, points_table, payouts_table, offset=0, with_points=True):
    by_position = {}
    for entry in entries:
        number = position_number(entry["position"])
        if number and number > 0:
            by_position.setdefault(number, []).append(entry)

    for number in sorted(by_position):
        tied = by_position[number]
        points = tied_award(points_table, number, len(tied), offset) if with_points else 0
        earnings = tied_award(payouts_table, number, len(tied), offset)
        for entry in tied:
            entry["points"] = half_up(points)
            entry["earnings"] = half_up(earnings)


class TeamScorer:
    """
    Scores every team in one tournament from its golfers' leaderboard rows.

    teams: dicts with team_id, tour_card_id, golfer_ids and bracket (the tour
        card's playoff flag: 1 gold, 2 silver, 0 none).
    golfers: leaderboard rows keyed by golfer api id, with position, score, today,
        thru and round_one..round_four.
    event_index: 0 for a regular event, 1 to 3 for the playoff events in order.
    starting_strokes: playoff strokes a team starts with, keyed by tour card id.
    """

    def __init__(self, teams, golfers, par, current_round, live, event_index=0, starting_strokes=None):
        self.teams = teams
        self.golfers = golfers
        self.par = par
        self.round = min(5, max(1, int(current_round or 1)))
        self.live = bool(live)
        self.event_index = event_index
        self.starting_strokes = starting_strokes or {}

    def team_golfers(self, team):
        return [self.golfers[api_id] for api_id in team["golfer_ids"] or [] if api_id in self.golfers]

    def active_golfers(self, team):
        return [golfer for golfer in self.team_golfers(team) if is_active_golfer(golfer)]

    def round_value(self, golfer, round_number):
        return golfer.get(ROUND_KEYS[round_number]) or 0

    def over_par(self, golfer, round_number, live):
        if live:
            return golfer.get("today") or 0
        return self.round_value(golfer, round_number) - self.par

    def is_eligible(self, team, required):
        return bool(team["golfer_ids"]) and len(self.active_golfers(team)) >= required

    def pool(self, team, round_number, live):
        required = selection_count(self.event_index, round_number)
        if required >= 10:
            return self.team_golfers(team)

        def rank(golfer):
            return self.over_par(golfer, round_number, live), golfer.get("score") or 0, golfer.get("api_id") or 0

        ranked = sorted(self.active_golfers(team), key=rank)
        return ranked[:required]

    def bracket(self, team):
        return GOLD if team["bracket"] == GOLD else SILVER

    def contribution(self, team, round_number, live):
        """
        A team's (strokes over par, thru) for a round. A team without enough golfers
        left takes the worst eligible score in its bracket.
        """
        required = selection_count(self.event_index, round_number)
        if self.is_eligible(team, required):
            pool = self.pool(team, round_number, live)
            if live:
                return average(g.get("today") or 0 for g in pool), average(g.get("thru") or 0 for g in pool)
            return average(self.over_par(g, round_number, False) for g in pool), 18

        worst, worst_thru = 0, None if live else 18
        for other in self.teams:
            if self.bracket(other) != self.bracket(team) or not self.is_eligible(other, required):
                continue
            pool = self.pool(other, round_number, live)
            value = average(self.over_par(g, round_number, live) for g in pool)
            if value > worst:
                worst = value
                worst_thru = average(g.get("thru") or 0 for g in pool) if live else 18
        return worst, worst_thru

    def raw_round(self, team, round_number):
        required = selection_count(self.event_index, round_number)
        if not self.is_eligible(team, required):
            return self.contribution(team, round_number, False)[0] + self.par
        return average(self.round_value(g, round_number) for g in self.pool(team, round_number, False))

    def score_team(self, team):
        entry = {
            "team_id": team["team_id"],
            "round": self.round,
            "round_one": None,
            "round_two": None,
            "round_three": None,
            "round_four": None,
            "today": None,
            "thru": None,
            "score": None,
            "points": 0,
            "earnings": 0,
            "cut": False,
        }
        base = self.starting_strokes.get(team["tour_card_id"], 0)

        if self.event_index == 0 and self.round >= 3 and len(self.active_golfers(team)) < 5:
            entry["cut"] = True
            entry["round_one"] = half_up(self.raw_round(team, 1), 1)
            entry["round_two"] = half_up(self.raw_round(team, 2), 1)
            return entry

        if self.round == 1:
            if self.live:
                today, thru = self.contribution(team, 1, True)
                entry["today"] = half_up(today, 1)
                entry["thru"] = half_up(thru, 1)
                if self.event_index == 0:
                    entry["score"] = half_up(average(g.get("score") or 0 for g in self.team_golfers(team)), 1)
                else:
                    entry["score"] = half_up(base + today, 1)
            return entry

        posted = range(1, min(self.round - 1, 4) + 1)
        for round_number in posted:
            entry[ROUND_KEYS[round_number]] = half_up(self.raw_round(team, round_number), 1)
        total = base + sum(self.contribution(team, round_number, False)[0] for round_number in posted)

        if self.live and self.round <= 4:
            today, thru = self.contribution(team, self.round, True)
            entry["today"] = half_up(today, 1)
            entry["thru"] = half_up(thru, 1)
            entry["score"] = half_up(total + today, 1)
        else:
            entry["today"] = half_up(self.contribution(team, posted[-1], False)[0], 1)
            entry["thru"] = 18
            entry["score"] = half_up(total, 1)
        return entry

    def score(self, points_table, payouts_table):
        """
        Score, place and pay every team. Regular events pay points and earnings from
        the tier tables by tied position. Playoff events place each bracket separately,
        award no points, and pay earnings only once the final event is complete.
        """
        entries = [self.score_team(team) for team in self.teams]
        brackets = {team["team_id"]: team["bracket"] for team in self.teams}

        if self.event_index == 0:
            labels = tied_labels(entries)
            for entry in entries:
                entry["position"] = "CUT" if entry["cut"] else labels.get(entry["team_id"])
            award(entries, points_table, payouts_table)
            return entries

        for entry in entries:
            entry["position"] = None
            entry["points"] = 0
            entry["earnings"] = 0
        for flag in (GOLD, SILVER):
            group = [entry for entry in entries if brackets[entry["team_id"]] == flag]
            labels = tied_labels(group)
            for entry in group:
                entry["position"] = labels.get(entry["team_id"])

        if self.event_index == 3 and self.round == 5:
            award([e for e in entries if brackets[e["team_id"]] == GOLD], points_table, payouts_table,
                  with_points=False)
            award([e for e in entries if brackets[e["team_id"]] == SILVER], points_table, payouts_table,
                  offset=SILVER_PAYOUT_OFFSET, with_points=False)
        return entries


def playoff_starting_strokes(cards, points_table):
    """
    Starting strokes for the first playoff event: each bracket is ranked by season
    points and takes strokes from the tier's points table, averaged across ties.

    cards: (tour_card_id, bracket, points) for every tour card playing the event.
    """
    strokes = {}
    for flag, depth in ((GOLD, GOLD_STARTING_STROKES), (SILVER, SILVER_STARTING_STROKES)):
        table = list(points_table[:depth])
        group = [card for card in cards if card[1] == flag]
        for card_id, _, points in group:
            better = sum(1 for other in group if other[2] > points)
            tied = sum(1 for other in group if other[2] == points)
            if tied > 1:
                strokes[card_id] = half_up(tied_award(table, better + 1, tied), 1)
            else:
                strokes[card_id] = table[better] if better < len(table) else 0
    return strokes
